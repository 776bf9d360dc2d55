"""Path parameter converters.

A converter named in a route path, like ``{id:int}``, only decides
whether a URL segment matches. Captured values stay strings in
``Instruction.params``.
"""

import re

# Pattern a single segment must fully match, per converter
SEGMENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "str": re.compile(r"[^/]+"),
    "int": re.compile(r"\d+"),
    "float": re.compile(r"\d+(?:\.\d+)?"),
    "path": re.compile(r".+"),
}


def is_converter(param_type: str) -> bool:
    return param_type in SEGMENT_PATTERNS


def accepts(param_type: str, value: str) -> bool:
    """Return True if *value* is a valid segment for *param_type*.

    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    return SEGMENT_PATTERNS[param_type].fullmatch(value) is not None
