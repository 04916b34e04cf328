from wmlink.jsonstream.generator import GeneratorError, GenStatus, JsonGenerator
from wmlink.jsonstream.parser import JsonParser, JsonVisitor, ParseStatus
from wmlink.jsonstream.reformat import ReformatResult, reformat
from wmlink.jsonstream.version import (
    UNKNOWN_VERSION,
    BarHeader,
    BarHeaderResult,
    VersionProbe,
    VersionResult,
    parse_bar_header,
    probe_version,
)

__all__ = [
    "UNKNOWN_VERSION",
    "BarHeader",
    "BarHeaderResult",
    "GenStatus",
    "GeneratorError",
    "JsonGenerator",
    "JsonParser",
    "JsonVisitor",
    "ParseStatus",
    "ReformatResult",
    "VersionProbe",
    "VersionResult",
    "parse_bar_header",
    "probe_version",
    "reformat",
]
