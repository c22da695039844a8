import typing
import enum

from .errors import InvalidTextError


class ImmutableString:
    value: typing.Union[None, str]

    def __init__(self, value: typing.Union[None, str, bytes]):
        if isinstance(value, bytes):
            try:
                value = value.decode("utf-8")
            except UnicodeDecodeError as error:
                raise InvalidTextError(f"String is not valid UTF-8: {error.reason}") from error

        elif value is not None:
            try:
                value.encode("utf-8")
            except UnicodeEncodeError as error:
                raise InvalidTextError(f"String {value!r} cannot be encoded as UTF-8") from error

        self.value = value

    @property
    def is_null(self) -> bool:
        return self.value is None

    def __eq__(self, other):
        if not isinstance(other, ImmutableString):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __repr__(self):
        return f"ImmutableString({self.value!r})"


# Deepest nesting accepted by the codec and the text bridge.
MAX_DEPTH = 100


class PropertyTree:
    class Type(enum.Enum):
        Null        = 0 # originally `None`
        Bool        = 1
        Number      = 2
        String      = 3
        List        = 4
        Dictionary  = 5

    key: ImmutableString
    value: typing.Union[None, bool, float, ImmutableString, list]
    type: Type
    any_type: int

    def __init__(self,
            key: typing.Union[None, ImmutableString],
            value: typing.Union[None, bool, float, ImmutableString, list],
            type: Type,
            any_type: int = 0
    ):
        if key is None:
            key = ImmutableString(None)

        self.key = key
        self.value = value
        self.type = type
        self.any_type = any_type

    @classmethod
    def none(cls, any_type: int = 0):
        return cls(None, None, cls.Type.Null, any_type)

    @classmethod
    def boolean(cls, value: bool, any_type: int = 0):
        return cls(None, bool(value), cls.Type.Bool, any_type)

    @classmethod
    def number(cls, value: float, any_type: int = 0):
        return cls(None, float(value), cls.Type.Number, any_type)

    @classmethod
    def string(cls, value: typing.Union[None, str, ImmutableString], any_type: int = 0):
        if not isinstance(value, ImmutableString):
            value = ImmutableString(value)
        return cls(None, value, cls.Type.String, any_type)

    @classmethod
    def sequence(cls, items: typing.Iterable["PropertyTree"], any_type: int = 0):
        return cls(None, [*items], cls.Type.List, any_type)

    @classmethod
    def dictionary(cls,
            pairs: typing.Iterable[typing.Tuple[typing.Union[None, str, ImmutableString], "PropertyTree"]],
            any_type: int = 0
    ):
        items = []
        for key, item in pairs:
            if not isinstance(key, ImmutableString):
                key = ImmutableString(key)
            item.key = key
            items.append(item)
        return cls(None, items, cls.Type.Dictionary, any_type)

    @property
    def is_container(self) -> bool:
        return self.type in (self.Type.List, self.Type.Dictionary)

    def keys(self) -> typing.List[typing.Optional[str]]:
        return [item.key.value for item in self.value]

    def get(self, key: str, default=None):
        """Return the first Dictionary child stored under `key`."""
        if self.type != self.Type.Dictionary:
            raise TypeError(f"Cannot look up {key!r} in a {self.type.name} node")

        for item in self.value:
            if item.key.value == key:
                return item
        return default

    def __eq__(self, other):
        if not isinstance(other, PropertyTree):
            return NotImplemented
        return (self.key == other.key and self.value == other.value and
                self.type == other.type and self.any_type == other.any_type)

    def __repr__(self):
        return f"PropertyTree({self.key.value!r}, {self.value!r}, {self.type!r}, anyType={self.any_type!r})"


class Version(typing.NamedTuple):
    # Factorio 1.1.110 becomes (1, 1, 110, 0)
    major: int
    minor: int
    patch: int
    build: int

    def __str__(self):
        return ".".join(str(part) for part in self)


class Header(typing.NamedTuple):
    version: Version
    flag: int = 0


DEFAULT_HEADER = Header(Version(1, 1, 110, 0), 0)


class ModSettings:
    data: PropertyTree
    header: Header
    trailer: bytes

    def __init__(self, data: PropertyTree, header: Header = DEFAULT_HEADER, trailer: bytes = b""):
        self.data = data
        self.header = header
        self.trailer = trailer

    @property
    def version(self) -> Version:
        return self.header.version

    def __eq__(self, other):
        if not isinstance(other, ModSettings):
            return NotImplemented
        return self.data == other.data and self.header == other.header and self.trailer == other.trailer

    def __repr__(self):
        return f"ModSettings({self.data!r}, header={self.header!r}, trailer={self.trailer!r})"
