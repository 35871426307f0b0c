"""
Source and fetch result types.

These objects are created fresh for every analysis run and never cached.
"""

from enum import Enum
from typing import List, Optional


class SourceKind(Enum):
    """Kinds of analysis input."""
    FILE = "file"
    URL = "url"
    INLINE = "inline"


class Source:
    """A single classified input: a local file, a URL or inline CSS text."""

    __slots__ = ("kind", "value")

    def __init__(self, kind: SourceKind, value: str):
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError("Source is immutable")

    def __eq__(self, other) -> bool:
        if not isinstance(other, Source):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.kind, self.value))

    def __repr__(self) -> str:
        return f"Source({self.kind.value}, {self.value!r})"

    @classmethod
    def file(cls, path: str) -> "Source":
        return cls(SourceKind.FILE, path)

    @classmethod
    def url(cls, address: str) -> "Source":
        return cls(SourceKind.URL, address)

    @classmethod
    def inline(cls, content: str) -> "Source":
        return cls(SourceKind.INLINE, content)


class CssPayload:
    """A fetched response that holds a stylesheet."""

    def __init__(self, text: str, url: Optional[str] = None):
        self.text = text
        self.url = url

    def __repr__(self) -> str:
        return f"CssPayload(url={self.url!r}, length={len(self.text)})"


class HtmlPayload:
    """
    A fetched HTML page.

    Attributes:
        body: The HTML text
        base_url: Final (post-redirect) URL used to resolve relative hrefs
        stylesheet_urls: Absolute URLs of ``<link rel="stylesheet">`` elements
        style_texts: Text of each ``<style>`` element, in document order
        link_count: Stylesheet links on the page, including those without an href
    """

    def __init__(self, body: str, base_url: str,
                 stylesheet_urls: Optional[List[str]] = None,
                 style_texts: Optional[List[str]] = None,
                 link_count: Optional[int] = None):
        self.body = body
        self.base_url = base_url
        self.stylesheet_urls = stylesheet_urls or []
        self.style_texts = style_texts or []
        self.link_count = len(self.stylesheet_urls) if link_count is None else link_count

    def __repr__(self) -> str:
        return (f"HtmlPayload(base_url={self.base_url!r}, "
                f"links={self.link_count}, styles={len(self.style_texts)})")


class Document:
    """The concatenation of every resolved CSS fragment."""

    def __init__(self, fragments: List[str]):
        self.text = "".join(fragments)
        self.size = len(self.text.encode("utf-8"))
        self.fragment_count = len(fragments)

    def __repr__(self) -> str:
        return f"Document(size={self.size}, fragments={self.fragment_count})"
