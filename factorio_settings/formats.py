import sys
import enum
import json
import typing

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from .errors import UnsupportedTextShapeError
from .text import TYPE_TAG, TextValue


class Format(enum.Enum):
    JSON = "json"
    TOML = "toml"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def from_path(cls, path: str) -> typing.Optional["Format"]:
        for format in cls:
            if path.lower().endswith(format.extension):
                return format
        return None


# TOML has no null, so nulls travel as the full-form Null node.
TOML_NULL = {TYPE_TAG: "Null"}


def _unique_object(pairs):
    obj = {}
    for key, value in pairs:
        if key in obj:
            raise UnsupportedTextShapeError(f"Duplicate key {key!r} in JSON object")
        obj[key] = value
    return obj


def _toml_table_like(value) -> bool:
    return isinstance(value, dict) or (isinstance(value, list) and bool(value) and
                                       all(isinstance(item, dict) for item in value))


def _toml_reorders(table: dict) -> bool:
    # tomli_w writes plain values before sub-tables and arrays of tables.
    kinds = [_toml_table_like(value) for value in table.values()]
    return kinds != sorted(kinds)


def _toml_encode(value):
    if value is None:
        return dict(TOML_NULL)

    if isinstance(value, list):
        return [_toml_encode(item) for item in value]

    if isinstance(value, dict):
        table = {key: _toml_encode(item) for key, item in value.items()}
        if TYPE_TAG not in value and _toml_reorders(table):
            return {TYPE_TAG: "Dictionary", "value": [[key, item] for key, item in table.items()]}
        return table

    return value


def _toml_decode(value):
    if value == TOML_NULL:
        return None
    if isinstance(value, list):
        return [_toml_decode(item) for item in value]
    if isinstance(value, dict):
        return {key: _toml_decode(item) for key, item in value.items()}
    return value


def dumps(value: TextValue, format: Format) -> str:
    if format == Format.TOML and not isinstance(value, dict):
        raise UnsupportedTextShapeError("TOML document root must be a table")

    try:
        if format == Format.JSON:
            return json.dumps(value, indent=4) + "\n"
        return tomli_w.dumps(_toml_encode(value))
    except RecursionError:
        raise UnsupportedTextShapeError(f"{format.name} value is nested too deeply") from None


def loads(text: str, format: Format) -> TextValue:
    try:
        if format == Format.JSON:
            return json.loads(text, object_pairs_hook=_unique_object)
        return _toml_decode(tomllib.loads(text))
    except RecursionError:
        raise UnsupportedTextShapeError(f"{format.name} document is nested too deeply") from None
