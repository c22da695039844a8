import struct

from .errors import TruncatedError


class ByteCursor:
    """
    Forward-only reader over `data` and writer into an internal buffer.

    All multi-byte values are little-endian.
    """

    position: int

    def __init__(self, data: bytes = b""):
        self._data = bytes(data)
        self._output = bytearray()
        self.position = 0

    def remaining(self) -> int:
        return len(self._data) - self.position

    def _take(self, size: int) -> bytes:
        if size > self.remaining():
            raise TruncatedError(self.position, size, self.remaining())
        chunk = self._data[self.position:self.position + size]
        self.position += size
        return chunk

    def read_u8(self) -> int:
        value, = struct.unpack("<B", self._take(1))
        return value

    def read_u16(self) -> int:
        value, = struct.unpack("<H", self._take(2))
        return value

    def read_u32(self) -> int:
        value, = struct.unpack("<I", self._take(4))
        return value

    def read_f64(self) -> float:
        value, = struct.unpack("<d", self._take(8))
        return value

    def read_bytes(self, size: int) -> bytes:
        return self._take(size)

    def write_u8(self, value: int):
        self._output += struct.pack("<B", value)

    def write_u16(self, value: int):
        self._output += struct.pack("<H", value)

    def write_u32(self, value: int):
        self._output += struct.pack("<I", value)

    def write_f64(self, value: float):
        self._output += struct.pack("<d", value)

    def write_bytes(self, value: bytes):
        self._output += value

    def getvalue(self) -> bytes:
        return bytes(self._output)
