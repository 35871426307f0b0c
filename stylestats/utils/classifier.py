"""
Source classification.
Sorts raw command line or API arguments into local files, URLs and inline
CSS strings.
"""

import glob
import logging
import os
import urllib.parse
from typing import Iterable, List, Union

from stylestats.parser.css_parser import looks_like_css
from stylestats.parser.syntax import SUPPORTED_EXTENSIONS
from stylestats.sources import Source, SourceKind

logger = logging.getLogger(__name__)


class ClassifiedSources:
    """Arguments sorted by kind, each list in input order."""

    def __init__(self):
        self.files: List[str] = []
        self.urls: List[str] = []
        self.styles: List[str] = []

    def add(self, source: Source) -> None:
        if source.kind == SourceKind.FILE:
            self.files.append(source.value)
        elif source.kind == SourceKind.URL:
            self.urls.append(source.value)
        else:
            self.styles.append(source.value)

    def is_empty(self) -> bool:
        return not (self.files or self.urls or self.styles)

    def __repr__(self) -> str:
        return (f"ClassifiedSources(files={len(self.files)}, urls={len(self.urls)}, "
                f"styles={len(self.styles)})")


def is_url(value: str) -> bool:
    """Return True for an http(s) address with a host."""
    parsed = urllib.parse.urlparse(value.strip())
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


def has_stylesheet_extension(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in SUPPORTED_EXTENSIONS


def classify_argument(arg: str) -> List[Source]:
    """
    Classify one argument.

    Args:
        arg: A path, directory, URL, glob pattern or CSS text

    Returns:
        List[Source]: Zero or more sources
    """
    if os.path.isfile(arg) and has_stylesheet_extension(arg):
        return [Source.file(arg)]

    if os.path.isdir(arg):
        names = sorted(os.listdir(arg))
        return [Source.file(os.path.join(arg, name)) for name in names
                if has_stylesheet_extension(name) and os.path.isfile(os.path.join(arg, name))]

    if is_url(arg):
        return [Source.url(arg.strip())]

    if looks_like_css(arg):
        return [Source.inline(arg)]

    matches = sorted(path for path in glob.glob(arg)
                     if os.path.splitext(path)[1].lower() == '.css' and os.path.isfile(path))
    if not matches:
        logger.warning(f"Argument matches no file, URL or CSS text: {arg[:80]!r}")
    return [Source.file(path) for path in matches]


def classify(args: Union[str, Iterable[str]]) -> ClassifiedSources:
    """
    Classify every argument, keeping input order within each kind.

    Args:
        args: A single argument or an iterable of arguments

    Returns:
        ClassifiedSources: The sorted arguments
    """
    if isinstance(args, str):
        args = [args]

    result = ClassifiedSources()
    for arg in args:
        for source in classify_argument(arg):
            result.add(source)

    logger.debug(f"Classified arguments: {result!r}")
    return result
