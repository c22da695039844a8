"""Lossless mapping between property trees and plain text values."""

import math
import struct
import typing

from .errors import NestingError, UnsupportedTextShapeError
from .tree import DEFAULT_HEADER, MAX_DEPTH, Header, ImmutableString, ModSettings, PropertyTree, Version


TYPE_TAG = "!type"
DOCUMENT_TYPE = "ModSettings"

_FULL_FORM_KEYS = {TYPE_TAG, "any_type", "value", "bits"}
_DOCUMENT_KEYS = {TYPE_TAG, "version", "flag", "data", "trailer"}

TextValue = typing.Union[None, bool, float, str, list, dict]

_DEFAULT_NAN = struct.pack(">d", float("nan"))


def _join(path: str, part) -> str:
    return f"{path}/{part}" if path else str(part)


def _nan_bits(value: float) -> typing.Optional[str]:
    # Only the default NaN has a text spelling; other payloads and signs travel as raw bits.
    if math.isnan(value) and struct.pack(">d", value) != _DEFAULT_NAN:
        return struct.pack(">d", value).hex()
    return None


def _needs_full_form(tree: PropertyTree) -> bool:
    if tree.any_type != 0:
        return True

    if tree.type == PropertyTree.Type.Number:
        return _nan_bits(tree.value) is not None

    if tree.type == PropertyTree.Type.String:
        return tree.value.value is None

    if tree.type == PropertyTree.Type.List:
        return any(item.key.value is not None for item in tree.value)

    if tree.type == PropertyTree.Type.Dictionary:
        keys = tree.keys()
        return None in keys or TYPE_TAG in keys or len(set(keys)) != len(keys)

    return False


def _full_form(tree: PropertyTree, depth: int) -> dict:
    result = {TYPE_TAG: tree.type.name}
    if tree.any_type != 0:
        result["any_type"] = tree.any_type

    if tree.type == PropertyTree.Type.Null:
        pass

    elif tree.type == PropertyTree.Type.Number and _nan_bits(tree.value) is not None:
        result["bits"] = _nan_bits(tree.value)

    elif tree.type == PropertyTree.Type.String:
        result["value"] = tree.value.value

    elif tree.is_container:
        result["value"] = [[item.key.value, tree_to_text(item, depth + 1)] for item in tree.value]

    else:
        result["value"] = tree.value

    return result


def tree_to_text(tree: PropertyTree, depth: int = 0) -> TextValue:
    if depth > MAX_DEPTH:
        raise NestingError(MAX_DEPTH)

    if _needs_full_form(tree):
        return _full_form(tree, depth)

    if tree.type == PropertyTree.Type.Null:
        return None

    if tree.type == PropertyTree.Type.Bool:
        return tree.value

    if tree.type == PropertyTree.Type.Number:
        return float(tree.value)

    if tree.type == PropertyTree.Type.String:
        return tree.value.value

    if tree.type == PropertyTree.Type.List:
        return [tree_to_text(item, depth + 1) for item in tree.value]

    return {item.key.value: tree_to_text(item, depth + 1) for item in tree.value}


def _number(value, path: str) -> float:
    try:
        return float(value)
    except OverflowError:
        raise UnsupportedTextShapeError(f"Number {value} does not fit in a double", path) from None


def _number_from_bits(bits, path: str) -> float:
    try:
        raw = bytes.fromhex(bits)
    except (TypeError, ValueError):
        raw = b""
    if len(raw) != 8:
        raise UnsupportedTextShapeError(f"bits must be 16 hex digits, not {bits!r}", path)

    value, = struct.unpack(">d", raw)
    return value


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _children(payload, path: str, depth: int) -> typing.List[PropertyTree]:
    if not isinstance(payload, list):
        raise UnsupportedTextShapeError("Expected a list of [key, value] pairs", path)

    items = []
    for index, pair in enumerate(payload):
        pair_path = _join(path, index)
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise UnsupportedTextShapeError("Expected a [key, value] pair", pair_path)

        key, value = pair
        if key is not None and not isinstance(key, str):
            raise UnsupportedTextShapeError(f"Key must be a string or null, not {type(key).__name__}", pair_path)

        item = tree_from_text(value, _join(pair_path, 1), depth)
        item.key = ImmutableString(key)
        items.append(item)

    return items


def _from_full_form(value: dict, path: str, depth: int) -> PropertyTree:
    type_name = value[TYPE_TAG]
    if type_name == DOCUMENT_TYPE:
        raise UnsupportedTextShapeError(f"{DOCUMENT_TYPE} document cannot be nested in a property tree", path)

    try:
        value_type = PropertyTree.Type[type_name]
    except (KeyError, TypeError):
        raise UnsupportedTextShapeError(f"Unknown {TYPE_TAG} {type_name!r}", path) from None

    unknown = [key for key in value if key not in _FULL_FORM_KEYS]
    if unknown:
        raise UnsupportedTextShapeError(f"Unexpected field(s) {', '.join(map(repr, unknown))}", path)

    any_type = value.get("any_type", 0)
    if not isinstance(any_type, int) or isinstance(any_type, bool) or not 0 <= any_type <= 0xff:
        raise UnsupportedTextShapeError(f"any_type must be an integer in 0..255, not {any_type!r}", path)

    if "bits" in value:
        if value_type != PropertyTree.Type.Number or "value" in value:
            raise UnsupportedTextShapeError("bits only replace the value of a Number node", path)
        return PropertyTree.number(_number_from_bits(value["bits"], _join(path, "bits")), any_type)

    value_path = _join(path, "value")
    if value_type == PropertyTree.Type.Null:
        if value.get("value") is not None:
            raise UnsupportedTextShapeError("Null node cannot carry a value", value_path)
        return PropertyTree.none(any_type)

    if "value" not in value:
        raise UnsupportedTextShapeError(f"{type_name} node is missing its value", path)
    payload = value["value"]

    if value_type == PropertyTree.Type.Bool:
        if not isinstance(payload, bool):
            raise UnsupportedTextShapeError(f"Expected a boolean, not {type(payload).__name__}", value_path)
        return PropertyTree.boolean(payload, any_type)

    if value_type == PropertyTree.Type.Number:
        if not _is_number(payload):
            raise UnsupportedTextShapeError(f"Expected a number, not {type(payload).__name__}", value_path)
        return PropertyTree.number(_number(payload, value_path), any_type)

    if value_type == PropertyTree.Type.String:
        if payload is not None and not isinstance(payload, str):
            raise UnsupportedTextShapeError(f"Expected a string or null, not {type(payload).__name__}", value_path)
        return PropertyTree.string(payload, any_type)

    items = _children(payload, value_path, depth + 1)
    return PropertyTree(None, items, value_type, any_type)


def tree_from_text(value: TextValue, path: str = "", depth: int = 0) -> PropertyTree:
    if depth > MAX_DEPTH:
        raise UnsupportedTextShapeError(f"Property tree nested deeper than {MAX_DEPTH} levels", path)

    if value is None:
        return PropertyTree.none()

    if isinstance(value, bool):
        return PropertyTree.boolean(value)

    if _is_number(value):
        return PropertyTree.number(_number(value, path))

    if isinstance(value, str):
        return PropertyTree.string(value)

    if isinstance(value, list):
        return PropertyTree.sequence(tree_from_text(item, _join(path, index), depth + 1)
                                     for index, item in enumerate(value))

    if isinstance(value, dict):
        if TYPE_TAG in value:
            return _from_full_form(value, path, depth)

        pairs = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise UnsupportedTextShapeError(f"Key must be a string, not {type(key).__name__}", path)
            pairs.append((key, tree_from_text(item, _join(path, key), depth + 1)))
        return PropertyTree.dictionary(pairs)

    raise UnsupportedTextShapeError(f"Cannot convert {type(value).__name__} value {value!r}", path)


def to_text(settings: ModSettings) -> dict:
    document = {
        TYPE_TAG: DOCUMENT_TYPE,
        "version": list(settings.header.version),
        "flag": settings.header.flag,
        "data": tree_to_text(settings.data),
    }
    if settings.trailer:
        document["trailer"] = settings.trailer.hex()
    return document


def _header_from_text(document: dict) -> Header:
    version = document.get("version")
    if (not isinstance(version, list) or len(version) != 4 or
            not all(isinstance(part, int) and not isinstance(part, bool) and 0 <= part <= 0xffff
                    for part in version)):
        raise UnsupportedTextShapeError(f"version must be four integers in 0..65535, not {version!r}", "version")

    flag = document.get("flag", 0)
    if isinstance(flag, bool):
        flag = int(flag)
    if not isinstance(flag, int) or not 0 <= flag <= 0xff:
        raise UnsupportedTextShapeError(f"flag must be an integer in 0..255, not {flag!r}", "flag")

    return Header(Version(*version), flag)


def from_text(value: TextValue, header: typing.Optional[Header] = None) -> ModSettings:
    if not (isinstance(value, dict) and value.get(TYPE_TAG) == DOCUMENT_TYPE):
        return ModSettings(tree_from_text(value), header or DEFAULT_HEADER)

    unknown = [key for key in value if key not in _DOCUMENT_KEYS]
    if unknown:
        raise UnsupportedTextShapeError(f"Unexpected field(s) {', '.join(map(repr, unknown))}")
    if "data" not in value:
        raise UnsupportedTextShapeError(f"{DOCUMENT_TYPE} document is missing its data")

    trailer = value.get("trailer", "")
    try:
        trailer = bytes.fromhex(trailer)
    except (TypeError, ValueError):
        raise UnsupportedTextShapeError(f"trailer must be a hex string, not {trailer!r}", "trailer") from None

    if header is None:
        header = _header_from_text(value)

    return ModSettings(tree_from_text(value["data"], "data"), header, trailer)
