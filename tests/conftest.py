import pytest

from factorio_settings import Header, ImmutableString, ModSettings, PropertyTree, Version, encode


# Factorio 1.1.82 settings with one startup string setting.
SAMPLE_DAT = bytes.fromhex(
    "01 00 01 00 52 00 04 00 00 05 00 03 00 00 00 00 07 73 74 61 72 74 75 70 05 00 01 00 00 00 00 11"
    "6D 79 2D 73 74 72 69 6E 67 2D 73 65 74 74 69 6E 67 05 00 01 00 00 00 00 05 76 61 6C 75 65 03 00"
    "00 08 64 65 61 64 62 65 65 66 00 0E 72 75 6E 74 69 6D 65 2D 67 6C 6F 62 61 6C 05 00 00 00 00 00"
    "00 10 72 75 6E 74 69 6D 65 2D 70 65 72 2D 75 73 65 72 05 00 00 00 00 00"
)


def setting(value: PropertyTree) -> PropertyTree:
    return PropertyTree.dictionary([("value", value)])


def make_rich_tree() -> PropertyTree:
    color = PropertyTree.dictionary([
        ("r", PropertyTree.number(1.0)),
        ("g", PropertyTree.number(0.5)),
        ("b", PropertyTree.number(0.25)),
        ("a", PropertyTree.number(1.0)),
    ])
    odd_list = PropertyTree.sequence([PropertyTree.number(1.0), PropertyTree.string("two")])
    odd_list.value[1].key = ImmutableString("slot")

    return PropertyTree.dictionary([
        ("startup", PropertyTree.dictionary([
            ("zz-enabled", setting(PropertyTree.boolean(True))),
            ("aa-count", setting(PropertyTree.number(-0.0))),
            ("long-text", setting(PropertyTree.string("x" * 300))),
        ])),
        ("runtime-global", PropertyTree.dictionary([
            ("empty-string", setting(PropertyTree.string(""))),
            ("null-string", setting(PropertyTree.string(None))),
            ("unicode", setting(PropertyTree.string("Zürich ✓"))),
            ("nothing", setting(PropertyTree.none())),
            ("infinite", setting(PropertyTree.number(float("inf")))),
        ])),
        ("runtime-per-user", PropertyTree.dictionary([
            ("color", setting(color)),
            ("list", setting(PropertyTree.sequence([PropertyTree.boolean(False), PropertyTree.none()]))),
            ("odd-list", setting(odd_list)),
            ("flagged", setting(PropertyTree.boolean(True, any_type=1))),
            ("dupes", PropertyTree.dictionary([
                ("value", PropertyTree.number(1.0)),
                ("value", PropertyTree.number(2.0)),
                (None, PropertyTree.none()),
                ("!type", PropertyTree.string("Bool")),
            ])),
        ])),
    ])


@pytest.fixture
def sample_dat() -> bytes:
    return SAMPLE_DAT


@pytest.fixture
def rich_settings() -> ModSettings:
    return ModSettings(make_rich_tree(), Header(Version(2, 0, 28, 3), 1))


@pytest.fixture
def rich_dat(rich_settings) -> bytes:
    return encode(rich_settings)
