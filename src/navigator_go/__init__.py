"""Go-to-definition navigation for Go sources backed by ``guru``."""

from .errors import NavigatorError
from .history import NavigationEntry, NavigationStack
from .location import Location, parse_definition
from .navigator import DefinitionNavigator, first_source_file
from .positions import Point, Range, decode_position, encode_offset
from .settings import Settings
from .tools import ToolCommand, ToolResolver

__all__ = [
    "DefinitionNavigator",
    "Location",
    "NavigationEntry",
    "NavigationStack",
    "NavigatorError",
    "Point",
    "Range",
    "Settings",
    "ToolCommand",
    "ToolResolver",
    "decode_position",
    "encode_offset",
    "first_source_file",
    "parse_definition",
]

__version__ = "0.1.0"
