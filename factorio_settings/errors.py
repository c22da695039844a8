import typing


class CodecError(Exception):
    pass


class TruncatedError(CodecError):
    offset: int
    wanted: int
    available: int

    def __init__(self, offset: int, wanted: int, available: int):
        super().__init__(f"Truncated data at offset {offset:#x}: "
                         f"need {wanted} byte(s), {available} available")
        self.offset = offset
        self.wanted = wanted
        self.available = available


class UnknownTagError(CodecError):
    tag: int
    offset: int

    def __init__(self, tag: int, offset: int):
        super().__init__(f"Unknown property tree type {tag:#x} at offset {offset:#x}")
        self.tag = tag
        self.offset = offset


class InvalidTextError(CodecError):
    offset: typing.Optional[int]

    def __init__(self, message: str, offset: typing.Optional[int] = None):
        if offset is not None:
            message = f"{message} at offset {offset:#x}"
        super().__init__(message)
        self.offset = offset


class UnsupportedTextShapeError(CodecError):
    path: str

    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{message} (at '{path or '/'}')")
        self.path = path


class SettingsShapeError(CodecError):
    pass


class NestingError(CodecError):
    offset: typing.Optional[int]

    def __init__(self, depth: int, offset: typing.Optional[int] = None):
        message = f"Property tree nested deeper than {depth} levels"
        if offset is not None:
            message = f"{message} at offset {offset:#x}"
        super().__init__(message)
        self.offset = offset
