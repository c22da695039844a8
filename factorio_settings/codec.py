import typing
import logging

from .cursor import ByteCursor
from .errors import InvalidTextError, NestingError, UnknownTagError
from .tree import MAX_DEPTH, Header, ImmutableString, ModSettings, PropertyTree, Version


logger = logging.getLogger(__name__)

STRING_LENGTH_MARKER = 0xff


def load_string(cursor: ByteCursor) -> ImmutableString:
    is_none = cursor.read_u8()

    if is_none:
        return ImmutableString(None)

    value_len = cursor.read_u8()
    if value_len == STRING_LENGTH_MARKER:
        value_len = cursor.read_u32()

    offset = cursor.position
    raw = cursor.read_bytes(value_len)
    try:
        return ImmutableString(raw.decode("utf-8"))
    except UnicodeDecodeError as error:
        raise InvalidTextError(f"String is not valid UTF-8 ({error.reason})", offset) from error


def save_string(cursor: ByteCursor, string: ImmutableString):
    cursor.write_u8(string.value is None)

    if string.value is not None:
        try:
            raw = string.value.encode("utf-8")
        except UnicodeEncodeError as error:
            raise InvalidTextError(f"String {string.value!r} cannot be encoded as UTF-8") from error

        # Lengths of 255 and up need the marker, since 0xff itself means "long form".
        if len(raw) >= STRING_LENGTH_MARKER:
            cursor.write_u8(STRING_LENGTH_MARKER)
            cursor.write_u32(len(raw))
        else:
            cursor.write_u8(len(raw))

        cursor.write_bytes(raw)


def load_tree(cursor: ByteCursor, depth: int = 0) -> PropertyTree:
    offset = cursor.position
    if depth > MAX_DEPTH:
        raise NestingError(MAX_DEPTH, offset)

    value_type_raw = cursor.read_u8()
    any_type = cursor.read_u8()
    try:
        value_type = PropertyTree.Type(value_type_raw)
    except ValueError:
        raise UnknownTagError(value_type_raw, offset) from None

    if value_type == PropertyTree.Type.Null:
        value = None

    elif value_type == PropertyTree.Type.Bool:
        value = bool(cursor.read_u8())

    elif value_type == PropertyTree.Type.Number:
        value = cursor.read_f64()

    elif value_type == PropertyTree.Type.String:
        value = load_string(cursor)

    else:
        count = cursor.read_u32()
        value = []

        # List items carry a key slot too; it is kept so that it can be written back.
        for _ in range(count):
            key = load_string(cursor)
            item = load_tree(cursor, depth + 1)
            item.key = key
            value.append(item)

    return PropertyTree(None, value, value_type, any_type)


def save_tree(cursor: ByteCursor, tree: PropertyTree, depth: int = 0):
    if depth > MAX_DEPTH:
        raise NestingError(MAX_DEPTH)

    cursor.write_u8(tree.type.value)
    cursor.write_u8(tree.any_type)

    if tree.type == PropertyTree.Type.Null:
        pass

    elif tree.type == PropertyTree.Type.Bool:
        cursor.write_u8(tree.value)

    elif tree.type == PropertyTree.Type.Number:
        cursor.write_f64(tree.value)

    elif tree.type == PropertyTree.Type.String:
        save_string(cursor, tree.value)

    else:
        cursor.write_u32(len(tree.value))

        for item in tree.value:
            save_string(cursor, item.key)
            save_tree(cursor, item, depth + 1)


def load_header(cursor: ByteCursor) -> Header:
    version = Version(cursor.read_u16(), cursor.read_u16(), cursor.read_u16(), cursor.read_u16())
    flag = cursor.read_u8()
    return Header(version, flag)


def save_header(cursor: ByteCursor, header: Header):
    for part in header.version:
        cursor.write_u16(part)
    cursor.write_u8(header.flag)


def decode(data: bytes) -> ModSettings:
    cursor = ByteCursor(data)
    header = load_header(cursor)
    tree = load_tree(cursor)

    trailer = cursor.read_bytes(cursor.remaining())
    if trailer:
        logger.debug("Keeping %d trailing byte(s) after the property tree", len(trailer))

    logger.debug("Decoded settings for Factorio %s (flag %#x)", header.version, header.flag)
    return ModSettings(tree, header, trailer)


def encode(settings: ModSettings, header: typing.Optional[Header] = None) -> bytes:
    if header is None:
        header = settings.header

    cursor = ByteCursor()
    save_header(cursor, header)
    save_tree(cursor, settings.data)
    cursor.write_bytes(settings.trailer)
    return cursor.getvalue()


def load(stream: typing.BinaryIO) -> ModSettings:
    return decode(stream.read())


def save(settings: ModSettings, stream: typing.BinaryIO, header: typing.Optional[Header] = None):
    stream.write(encode(settings, header))
