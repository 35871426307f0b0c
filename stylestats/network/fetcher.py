"""
HTTP fetcher for remote stylesheets.
This module retrieves URLs and classifies each response as a stylesheet or
an HTML page whose stylesheets are discovered for a second round.
"""

import logging
from typing import Any, Dict, Optional, Union

import certifi
import requests
from requests.adapters import HTTPAdapter

from stylestats import __version__
from stylestats.errors import TransportError
from stylestats.parser.css_parser import looks_like_css
from stylestats.parser.html_parser import HTMLParser
from stylestats.sources import CssPayload, HtmlPayload

logger = logging.getLogger(__name__)

USER_AGENT = f"stylestats/{__version__} (+https://pypi.org/project/stylestats/)"


class Fetcher:
    """
    Fetcher for remote stylesheets.

    Request options (headers, timeout, proxies, ...) are passed through to
    every request unchanged. No retries are performed: a failed request is
    terminal for the run.
    """

    def __init__(self, request_options: Optional[Dict[str, Any]] = None,
                 pool_size: int = 8, session: Optional[requests.Session] = None):
        """
        Initialize the fetcher.

        Args:
            request_options: Keyword arguments for ``requests.Session.get``
            pool_size: Connection pool size, matching the worker cap
            session: Optional preconfigured session
        """
        self.request_options = dict(request_options or {})
        self.html_parser = HTMLParser()
        self.session = session or self._create_session(pool_size)

    def _create_session(self, pool_size: int) -> requests.Session:
        """
        Create a new requests session.

        Args:
            pool_size: Connections kept per host

        Returns:
            A configured requests session
        """
        session = requests.Session()

        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        # Use certifi for SSL certificates unless the request options say otherwise
        session.verify = certifi.where()

        session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "text/css,text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
        })

        return session

    def get(self, url: str) -> requests.Response:
        """
        Perform a GET request.

        Args:
            url: The URL to request

        Returns:
            The HTTP response

        Raises:
            TransportError: On connection failure or a status other than 200
        """
        logger.debug(f"GET request: {url}")

        options = dict(self.request_options)
        options.setdefault("allow_redirects", True)

        try:
            response = self.session.get(url, **options)
        except requests.RequestException as e:
            raise TransportError(f"Request failed: {e}", source=url) from e

        logger.debug(f"Response: {response.status_code} - {url}")

        if response.status_code != 200:
            raise TransportError(f"Status code is {response.status_code}", source=url)

        return response

    def classify(self, response: requests.Response) -> Union[CssPayload, HtmlPayload]:
        """
        Classify a response as a stylesheet or an HTML page.

        Args:
            response: A successful response

        Returns:
            CssPayload or HtmlPayload

        Raises:
            TransportError: If the content type is neither HTML nor CSS
        """
        content_type = response.headers.get('Content-Type', '').lower()
        body = self.decode(response)
        final_url = response.url

        if 'css' in content_type:
            return CssPayload(body, final_url)

        if 'html' in content_type:
            stylesheet_urls, style_texts, link_count = self.html_parser.discover(body, final_url)
            return HtmlPayload(body, final_url, stylesheet_urls, style_texts, link_count)

        if looks_like_css(body):
            logger.debug(f"Treating {final_url} as CSS (content type {content_type or 'missing'})")
            return CssPayload(body, final_url)

        raise TransportError(
            f"content type is neither HTML nor CSS: {content_type or 'missing'}", source=final_url)

    def decode(self, response: requests.Response) -> str:
        """
        Decode a response body.

        requests falls back to ISO-8859-1 for ``text/*`` responses without a
        charset, which mangles UTF-8 stylesheets. The body is decoded here
        with the declared charset, or UTF-8 when none is declared.

        Args:
            response: The response object

        Returns:
            str: The decoded text
        """
        content_type = response.headers.get('Content-Type', '').lower()
        charset = None

        # Extract charset from Content-Type header
        if 'charset=' in content_type:
            charset = content_type.split('charset=')[1].split(';')[0].strip().strip('"\'')

        if charset:
            try:
                return response.content.decode(charset, errors='replace')
            except LookupError:
                logger.warning(f"Unknown charset {charset} for {response.url}, using UTF-8")

        return response.content.decode('utf-8', errors='replace')

    def fetch(self, url: str) -> Union[CssPayload, HtmlPayload]:
        """Fetch a first-round URL and classify the response."""
        return self.classify(self.get(url))

    def fetch_text(self, url: str) -> str:
        """
        Fetch a stylesheet linked from an HTML page.

        Linked stylesheets are taken as CSS without further classification,
        so discovery never goes deeper than one level.
        """
        return self.decode(self.get(url))

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
