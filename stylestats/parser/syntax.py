"""
Syntax normalization.
Local files are read as CSS or compiled to CSS from LESS or Stylus, using
the originating file as the compilation context.
"""

import io
import logging
import os
import subprocess
from typing import Optional

import lesscpy

from stylestats.errors import CompileError, InputError

logger = logging.getLogger(__name__)

CSS = "css"
LESS = "less"
STYLUS = "stylus"

SYNTAX_BY_EXTENSION = {
    ".css": CSS,
    ".less": LESS,
    ".styl": STYLUS,
    ".stylus": STYLUS,
}

SUPPORTED_EXTENSIONS = tuple(SYNTAX_BY_EXTENSION)


class _NamedStream(io.StringIO):
    """Text stream carrying a file name, so lesscpy resolves imports relative to it."""

    def __init__(self, text: str, name: str):
        super().__init__(text)
        self.name = name


def syntax_for(path: str) -> str:
    """
    Get the stylesheet syntax of a file from its extension.

    Raises:
        InputError: If the extension is not a supported stylesheet type
    """
    extension = os.path.splitext(path)[1].lower()
    try:
        return SYNTAX_BY_EXTENSION[extension]
    except KeyError:
        raise InputError(f"Unsupported stylesheet extension {extension or '(none)'}", source=path) from None


def compile_less(text: str, context_path: str) -> str:
    try:
        return lesscpy.compile(_NamedStream(text, context_path), minify=False)
    except Exception as e:
        raise CompileError(f"LESS compilation failed: {e}", source=context_path) from e


def compile_stylus(text: str, context_path: str, command: str = "stylus") -> str:
    include_dir = os.path.dirname(os.path.abspath(context_path))
    try:
        result = subprocess.run(
            [command, "--include", include_dir],
            input=text,
            capture_output=True,
            text=True,
            cwd=include_dir,
        )
    except OSError as e:
        raise CompileError(f"Cannot run Stylus compiler '{command}': {e}", source=context_path) from e

    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise CompileError(f"Stylus compilation failed: {detail}", source=context_path)

    return result.stdout


def compile_source(text: str, context_path: str, syntax: str,
                   stylus_command: str = "stylus") -> str:
    """
    Compile source text of the given syntax to CSS.

    Args:
        text: Source text
        context_path: Path of the originating file
        syntax: ``css``, ``less`` or ``stylus``
        stylus_command: Executable used for Stylus sources

    Returns:
        str: CSS text

    Raises:
        CompileError: If the compiler rejects the source or is unavailable
    """
    if syntax == CSS:
        return text
    if syntax == LESS:
        return compile_less(text, context_path)
    if syntax == STYLUS:
        return compile_stylus(text, context_path, stylus_command)
    raise CompileError(f"Unknown syntax {syntax}", source=context_path)


class SyntaxNormalizer:
    """Reads local stylesheet files and normalizes them to plain CSS."""

    def __init__(self, stylus_command: Optional[str] = None):
        self.stylus_command = stylus_command or "stylus"

    def read(self, path: str) -> str:
        """
        Read a local file as CSS.

        Args:
            path: Path to a .css, .less, .styl or .stylus file

        Returns:
            str: Plain CSS text

        Raises:
            InputError: If the file cannot be read
            CompileError: If compilation fails
        """
        syntax = syntax_for(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            raise InputError(f"Cannot read file: {e}", source=path) from e

        if syntax != CSS:
            logger.debug(f"Compiling {syntax} source {path}")
        return compile_source(text, os.path.abspath(path), syntax, self.stylus_command)
