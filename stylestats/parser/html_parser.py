"""
HTML stylesheet discovery.
This module finds the stylesheets a fetched HTML page links to and the
CSS embedded in its ``<style>`` elements.
"""

import logging
import urllib.parse
from typing import List, Tuple

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)


class HTMLParser:
    """HTML parser using BeautifulSoup with html5lib for full HTML5 support."""

    def parse(self, html_content: str) -> BeautifulSoup:
        """
        Parse HTML content into a DOM tree.

        Args:
            html_content: HTML content to parse

        Returns:
            BeautifulSoup: Parsed DOM
        """
        return BeautifulSoup(html_content, 'html5lib')

    def discover(self, html_content: str, base_url: str) -> Tuple[List[str], List[str], int]:
        """
        Find linked and embedded stylesheets.

        Args:
            html_content: HTML page body
            base_url: Final URL of the page, for resolving relative hrefs

        Returns:
            Tuple[List[str], List[str], int]: Absolute stylesheet URLs and the text
            of every ``<style>`` element, both in document order, and the number
            of stylesheet links including those without an href
        """
        dom = self.parse(html_content)

        stylesheet_urls = []
        link_count = 0
        for link in dom.find_all('link'):
            if not self._is_stylesheet_link(link):
                continue
            link_count += 1
            href = (link.get('href') or '').strip()
            if not href:
                logger.debug("Stylesheet link without href is counted but not fetched")
                continue
            stylesheet_urls.append(urllib.parse.urljoin(base_url, href))

        style_texts = [style.get_text() for style in dom.find_all('style')]

        logger.debug(f"Discovered {link_count} linked stylesheet(s) and "
                     f"{len(style_texts)} style element(s) in {base_url}")
        return stylesheet_urls, style_texts, link_count

    @staticmethod
    def _is_stylesheet_link(link: Tag) -> bool:
        rel = link.get('rel') or []
        # bs4 exposes rel as a list of tokens
        if isinstance(rel, str):
            rel = rel.split()
        return any(token.lower() == 'stylesheet' for token in rel)
