"""
stylestats - statistics about the structure of stylesheets.
"""

# Package information
__version__ = "0.1.0"
__author__ = "stylestats contributors"
__description__ = "Statistics about stylesheets: selectors, colors, fonts, declarations and size"

from stylestats.core.engine import StyleStats  # noqa: E402
from stylestats.errors import (  # noqa: E402
    CompileError,
    ConfigError,
    InputError,
    ParseError,
    StyleStatsError,
    TransportError,
)

__all__ = [
    'StyleStats',
    'StyleStatsError',
    'ConfigError',
    'InputError',
    'TransportError',
    'CompileError',
    'ParseError',
]
