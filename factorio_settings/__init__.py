from .errors import (CodecError, TruncatedError, UnknownTagError, InvalidTextError,
                     UnsupportedTextShapeError, SettingsShapeError, NestingError)
from .cursor import ByteCursor
from .tree import ImmutableString, PropertyTree, Version, Header, DEFAULT_HEADER, MAX_DEPTH, ModSettings
from .codec import decode, encode, load, save
from .text import to_text, from_text, tree_to_text, tree_from_text
from .formats import Format, dumps, loads
from .simple import to_simple, from_simple

__version__ = "0.1.0"
