"""Simplified, lossy view of the three setting scopes with each value tagged by its kind."""

import typing

from .errors import SettingsShapeError
from .tree import Header, ModSettings, PropertyTree, Version


SCOPES = ("startup", "runtime-global", "runtime-per-user")
COLOR_CHANNELS = ("r", "g", "b", "a")


def _simple_value(name: str, setting: PropertyTree) -> dict:
    if setting.type != PropertyTree.Type.Dictionary:
        raise SettingsShapeError(f"Mod setting {name!r} should be a dictionary")

    value = setting.get("value")
    if value is None:
        raise SettingsShapeError(f"Mod setting {name!r} is missing its value property")

    if value.type == PropertyTree.Type.Null:
        return {"type": "None"}

    if value.type in (PropertyTree.Type.Bool, PropertyTree.Type.Number):
        return {"type": value.type.name, "value": value.value}

    if value.type == PropertyTree.Type.String:
        return {"type": "String", "value": value.value.value}

    if value.type == PropertyTree.Type.Dictionary:
        # Only colors are stored as dictionaries.
        color = {}
        for channel in COLOR_CHANNELS:
            component = value.get(channel)
            if component is None or component.type != PropertyTree.Type.Number:
                raise SettingsShapeError(f"Mod setting {name!r} looks like a color but has no numeric {channel!r}")
            color[channel] = component.value
        return {"type": "Color", "value": color}

    raise SettingsShapeError(f"Mod setting {name!r} has unsupported value type {value.type.name}")


def to_simple(settings: ModSettings) -> dict:
    root = settings.data
    if root.type != PropertyTree.Type.Dictionary:
        raise SettingsShapeError("Main properties is not a dictionary")

    simple = {"factorio_version": settings.version._asdict()}
    for scope in SCOPES:
        properties = root.get(scope)
        if properties is None:
            raise SettingsShapeError(f"Missing {scope} settings")
        if properties.type != PropertyTree.Type.Dictionary:
            raise SettingsShapeError(f"{scope} settings is not a dictionary")

        values = {}
        for item in properties.value:
            name = item.key.value
            if name is None or name in values:
                raise SettingsShapeError(f"{scope} settings has a null or repeated name {name!r}")
            values[name] = _simple_value(name, item)
        simple[scope] = values

    return simple


def _number(name: str, value) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise SettingsShapeError(f"Mod setting {name!r} needs a number, not {value!r}")
    return float(value)


def _tree_value(name: str, simple: typing.Any) -> PropertyTree:
    if not isinstance(simple, dict) or "type" not in simple:
        raise SettingsShapeError(f"Mod setting {name!r} needs a type")

    kind = simple["type"]
    value = simple.get("value")

    if kind == "None":
        return PropertyTree.none()

    if kind == "Bool":
        if not isinstance(value, bool):
            raise SettingsShapeError(f"Mod setting {name!r} needs a boolean, not {value!r}")
        return PropertyTree.boolean(value)

    if kind == "Number":
        return PropertyTree.number(_number(name, value))

    if kind == "String":
        if value is not None and not isinstance(value, str):
            raise SettingsShapeError(f"Mod setting {name!r} needs a string, not {value!r}")
        return PropertyTree.string(value)

    if kind == "Color":
        if not isinstance(value, dict):
            raise SettingsShapeError(f"Mod setting {name!r} needs a color table, not {value!r}")
        return PropertyTree.dictionary(
            (channel, PropertyTree.number(_number(name, value.get(channel))))
            for channel in COLOR_CHANNELS)

    raise SettingsShapeError(f"Mod setting {name!r} has unknown type {kind!r}")


def from_simple(simple: dict) -> ModSettings:
    try:
        version = Version(**simple["factorio_version"])
    except (KeyError, TypeError):
        raise SettingsShapeError("factorio_version needs major, minor, patch and build") from None
    if not all(isinstance(part, int) and not isinstance(part, bool) and 0 <= part <= 0xffff for part in version):
        raise SettingsShapeError(f"factorio_version parts must be integers in 0..65535, not {version!r}")

    scopes = []
    for scope in SCOPES:
        values = simple.get(scope, {})
        if not isinstance(values, dict):
            raise SettingsShapeError(f"{scope} settings is not a table")

        properties = PropertyTree.dictionary(
            (name, PropertyTree.dictionary([("value", _tree_value(name, value))]))
            for name, value in values.items())
        scopes.append((scope, properties))

    return ModSettings(PropertyTree.dictionary(scopes), Header(version, 0))
