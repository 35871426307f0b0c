"""
Error types raised by the analysis pipeline.

Every failure is fatal: the pipeline either produces a complete metric record
or raises exactly one of these errors, with the originating exception kept
as ``__cause__``.
"""

from typing import Optional


class StyleStatsError(Exception):
    """Base class for all stylestats errors."""

    kind = "error"

    def __init__(self, message: str, source: Optional[str] = None):
        """
        Initialize the error.

        Args:
            message: Human readable description
            source: Path or URL of the source that failed, if any
        """
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.source:
            return f"{message} ({self.source})"
        return message


class ConfigError(StyleStatsError):
    """Raised when the option set cannot be loaded or is invalid."""

    kind = "config"


class InputError(StyleStatsError):
    """Raised when there is no usable source to analyze."""

    kind = "input"


class TransportError(StyleStatsError):
    """Raised on request failure, non-200 status or unexpected content type."""

    kind = "transport"


class CompileError(StyleStatsError):
    """Raised when a LESS or Stylus source cannot be compiled to CSS."""

    kind = "compile"


class ParseError(StyleStatsError):
    """Raised when the merged document is rejected or yields no rules."""

    kind = "parse"

    def __init__(self, message: str, source: Optional[str] = None,
                 line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        super().__init__(message, source)
