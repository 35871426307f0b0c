"""
StyleStats engine.
This module ties the pipeline together: classification, source resolution,
rule extraction and analysis, producing one flat metric record.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from stylestats.core.analyzer import Analyzer
from stylestats.core.resolver import SourceResolver
from stylestats.network.fetcher import Fetcher
from stylestats.parser.css_parser import RuleExtractor
from stylestats.utils.classifier import classify
from stylestats.utils.config import Config
from stylestats.utils.logging import PerformanceLogger

logger = logging.getLogger(__name__)


class StyleStats:
    """
    Stylesheet statistics for a set of files, URLs and inline CSS strings.

    Example:
        >>> stats = StyleStats(["path/to/app.css", "https://example.com/"])
        >>> record = stats.parse()
        >>> record["rules"]
    """

    def __init__(self, args: Union[str, Iterable[str]],
                 config: Union[str, Mapping[str, Any], Config, None] = None,
                 fetcher: Optional[Fetcher] = None):
        """
        Initialize the engine.

        Args:
            args: Paths, directories, globs, URLs or CSS text
            config: Path to a JSON config file, a mapping of options, or a Config
            fetcher: Optional fetcher, mainly for tests
        """
        self.config = config if isinstance(config, Config) else Config(config)

        sources = classify(args)
        self.files = sources.files
        self.urls = sources.urls
        self.styles = sources.styles

        self.fetcher = fetcher
        self.perf = PerformanceLogger(logger, "stylestats")

    def parse(self) -> Dict[str, Any]:
        """
        Run the whole analysis.

        Returns:
            Dict[str, Any]: The metric record

        Raises:
            StyleStatsError: The first failure of any stage; no partial record
        """
        resolver = SourceResolver(self.files, self.urls, self.styles,
                                  config=self.config, fetcher=self.fetcher)

        self.perf.start("resolve")
        resolved = resolver.resolve()
        self.perf.end("resolve")

        self.perf.start("extract")
        extracted = RuleExtractor().extract(resolved.document.text)
        self.perf.end("extract")

        self.perf.start("analyze")
        analysis = Analyzer(
            extracted.rules,
            extracted.selectors,
            extracted.declarations,
            resolved.document.text,
            resolved.document.size,
            self.config,
        ).analyze()
        self.perf.end("analyze")

        stats: Dict[str, Any] = {}

        if self.config.enabled("published"):
            stats["published"] = datetime.now().isoformat()

        if self.config.enabled("paths"):
            stats["paths"] = self.files + self.urls

        if self.config.enabled("stylesheets"):
            stats["stylesheets"] = len(self.files) + resolved.stylesheet_count

        if self.config.enabled("styleElements") and resolved.style_element_count:
            stats["styleElements"] = resolved.style_element_count

        stats.update(analysis)

        if self.config.enabled("mediaQueries"):
            stats["mediaQueries"] = extracted.media_queries

        return stats
