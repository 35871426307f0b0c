"""
Source resolution.
Resolves local files, URLs and inline strings into one CSS document in two
concurrent rounds: first every file and URL, then every stylesheet linked
from the HTML pages fetched in the first round.
"""

import functools
import logging
from typing import List, Optional, Sequence

from stylestats.errors import InputError
from stylestats.network.fetcher import Fetcher
from stylestats.parser.syntax import SyntaxNormalizer
from stylestats.sources import CssPayload, Document
from stylestats.utils.concurrency import run_round
from stylestats.utils.config import Config

logger = logging.getLogger(__name__)


class ResolvedSources:
    """
    Outcome of source resolution.

    Attributes:
        document: The merged CSS document
        stylesheet_count: Remote stylesheets seen (CSS responses plus linked ones)
        style_element_count: ``<style>`` elements found in fetched HTML
    """

    def __init__(self, document: Document, stylesheet_count: int = 0, style_element_count: int = 0):
        self.document = document
        self.stylesheet_count = stylesheet_count
        self.style_element_count = style_element_count


class SourceResolver:
    """Turns classified sources into a single CSS document."""

    def __init__(self, files: Sequence[str], urls: Sequence[str], styles: Sequence[str],
                 config: Optional[Config] = None, fetcher: Optional[Fetcher] = None,
                 normalizer: Optional[SyntaxNormalizer] = None):
        """
        Initialize the resolver.

        Args:
            files: Local stylesheet paths, in input order
            urls: Remote addresses, in input order
            styles: Inline CSS strings, in input order
            config: Run configuration
            fetcher: Optional fetcher (created from the config when omitted)
            normalizer: Optional syntax normalizer
        """
        self.files = list(files)
        self.urls = list(urls)
        self.styles = list(styles)
        self.config = config or Config()
        self._fetcher = fetcher
        self.normalizer = normalizer or SyntaxNormalizer(self.config.get("stylusCommand"))

    def resolve(self) -> ResolvedSources:
        """
        Resolve every source.

        Returns:
            ResolvedSources: The merged document and source counts

        Raises:
            InputError: If there is nothing to analyze
            TransportError, CompileError: The first failure of either round
        """
        if not (self.files or self.urls or self.styles):
            raise InputError("no source to analyze")

        owns_fetcher = self._fetcher is None and bool(self.urls)
        fetcher = self._fetcher
        if owns_fetcher:
            fetcher = Fetcher(self.config.request_options(), pool_size=self.config.max_workers)

        try:
            return self._resolve(fetcher)
        finally:
            if owns_fetcher:
                fetcher.close()

    def _resolve(self, fetcher: Optional[Fetcher]) -> ResolvedSources:
        workers = self.config.max_workers

        # Round one: each task owns the slot at its input position
        tasks = [functools.partial(self.normalizer.read, path) for path in self.files]
        tasks += [functools.partial(fetcher.fetch, url) for url in self.urls]
        results = run_round(tasks, max_workers=workers, name="first-round")

        file_fragments: List[str] = results[:len(self.files)]
        remote_fragments: List[str] = []
        discovered: List[str] = []
        stylesheet_count = 0
        style_element_count = 0

        for payload in results[len(self.files):]:
            if isinstance(payload, CssPayload):
                stylesheet_count += 1
                remote_fragments.append(payload.text)
            else:
                stylesheet_count += payload.link_count
                style_element_count += len(payload.style_texts)
                remote_fragments.extend(payload.style_texts)
                discovered.extend(payload.stylesheet_urls)

        # Round two: stylesheets linked from HTML, never followed further
        linked_fragments: List[str] = []
        if discovered:
            linked_fragments = run_round(
                [functools.partial(fetcher.fetch_text, url) for url in discovered],
                max_workers=workers, name="second-round")

        document = Document(file_fragments + self.styles + remote_fragments + linked_fragments)
        logger.info(f"Resolved {document.fragment_count} fragment(s) into {document.size} bytes")

        return ResolvedSources(document, stylesheet_count, style_element_count)
