"""
Statistics engine.
Derives the metric record from the flattened rules, selectors and
declarations of a document.

Metrics are declared once in ``METRICS``, each with the options it depends
on. Intermediate analyses are computed lazily, so a disabled metric costs
nothing beyond what the enabled ones already need.
"""

import gzip
import logging
import re
from collections import Counter
from functools import cached_property
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from stylestats.parser.css_parser import Declaration, Rule
from stylestats.utils.config import Config

logger = logging.getLogger(__name__)

DATA_URI_RE = re.compile(r'data:image/[A-Za-z0-9;,+=/]+')
IMPORTANT_RE = re.compile(r'!important')
UNQUALIFIED_ATTRIBUTE_RE = re.compile(r'\[.+\]$')
# '|' collapses too: namespace separators and the |= operator
COMBINATOR_SPACE_RE = re.compile(r'\s?([>|+~])\s?')
WHITESPACE_RE = re.compile(r'\s+')
IDENTIFIER_SPLIT_RE = re.compile(r'\s|>|\+|~|:|[A-Za-z0-9_\]]\.|[A-Za-z0-9_\]]#|\[')
HEX_SHORTHAND_RE = re.compile(r'^#([0-9A-F])([0-9A-F])([0-9A-F])$')
NON_NUMERIC_RE = re.compile(r'[^0-9.]')

IGNORED_COLORS = ('TRANSPARENT', 'INHERIT')

# Sentinel for "metric not applicable": the key is left out of the record
SKIP = object()


class Counted(NamedTuple):
    """A label paired with a count."""
    label: str
    count: int


def take_max(items: Iterable[Counted]) -> Optional[Counted]:
    """
    Get the item with the highest count without mutating the input.

    Ties resolve to the first occurrence.
    """
    best = None
    for item in items:
        if best is None or item.count > best.count:
            best = item
    return best


def normalize_selector(selector: str) -> str:
    """Remove whitespace around ``>``, ``+`` and ``~`` and collapse the rest."""
    trimmed = COMBINATOR_SPACE_RE.sub(r'\1', selector)
    return WHITESPACE_RE.sub(' ', trimmed)


def count_identifiers(selector: str) -> int:
    """
    Approximate the chain depth of a selector.

    >>> count_identifiers(".a .b > .c")
    3
    """
    return len(IDENTIFIER_SPLIT_RE.split(normalize_selector(selector)))


def normalize_color(value: str) -> str:
    color = IMPORTANT_RE.sub('', value, count=1).upper().strip()
    return HEX_SHORTHAND_RE.sub(r'#\1\1\2\2\3\3', color)


def font_size_key(value: str) -> float:
    """Sort key for font sizes: the leading magnitude with units stripped."""
    try:
        return float(NON_NUMERIC_RE.sub('', value) or 0)
    except ValueError:
        return 0.0


def unique(values: Iterable[str]) -> List[str]:
    """Deduplicate, keeping first occurrences in order."""
    return list(dict.fromkeys(values))


def gzip_size(text: str) -> int:
    """Size in bytes of the gzip-compressed UTF-8 text."""
    return len(gzip.compress(text.encode('utf-8'), compresslevel=9))


class SelectorStats:
    def __init__(self):
        self.id_selectors = 0
        self.universal_selectors = 0
        self.unqualified_attribute_selectors = 0
        self.javascript_specific_selectors = 0
        self.user_specified_selectors = 0
        self.identifiers: List[Counted] = []


class DeclarationStats:
    def __init__(self):
        self.data_uri_size = 0
        self.important_keywords = 0
        self.float_properties = 0
        self.unique_font_sizes: List[str] = []
        self.unique_font_families: List[str] = []
        self.unique_colors: List[str] = []
        self.properties: List[Counted] = []


class Analyzer:
    """Computes the metric record for one document."""

    def __init__(self, rules: Sequence[Rule], selectors: Sequence[str],
                 declarations: Sequence[Declaration], css_text: str, css_size: int,
                 config: Optional[Config] = None):
        """
        Initialize the analyzer.

        Args:
            rules: Flattened rules
            selectors: Every selector of every rule
            declarations: Every declaration of every rule
            css_text: The merged document text
            css_size: UTF-8 byte size of the document
            config: Option set; defaults when omitted
        """
        self.rules = tuple(rules)
        self.selectors = tuple(selectors)
        self.declarations = tuple(declarations)
        self.css_text = css_text
        self.css_size = css_size
        self.config = config or Config()

    @cached_property
    def declaration_counts(self) -> Tuple[Counted, ...]:
        """Declaration count per rule with declarations, densest first."""
        counts = [Counted(rule.selector_text, len(rule.declarations))
                  for rule in self.rules if rule.declarations]
        return tuple(sorted(counts, key=lambda item: item.count, reverse=True))

    @cached_property
    def selector_stats(self) -> SelectorStats:
        stats = SelectorStats()
        js_pattern = self.config.pattern('javascriptSpecificSelectors')
        user_pattern = self.config.pattern('userSpecifiedSelectors')

        for selector in self.selectors:
            stripped = selector.strip()
            if '#' in selector:
                stats.id_selectors += 1
            if '*' in selector:
                stats.universal_selectors += 1
            if UNQUALIFIED_ATTRIBUTE_RE.search(stripped):
                stats.unqualified_attribute_selectors += 1
            if js_pattern is not None and js_pattern.search(stripped):
                stats.javascript_specific_selectors += 1
            if user_pattern is not None and user_pattern.search(stripped):
                stats.user_specified_selectors += 1
            stats.identifiers.append(Counted(selector, count_identifiers(selector)))

        stats.identifiers.sort(key=lambda item: item.count, reverse=True)
        return stats

    @cached_property
    def declaration_stats(self) -> DeclarationStats:
        stats = DeclarationStats()
        data_uris: List[str] = []
        font_sizes: List[str] = []
        font_families: List[str] = []
        colors: List[str] = []
        properties: Counter = Counter()

        for declaration in self.declarations:
            prop = declaration.property
            value = declaration.value

            if 'data:image' in value:
                data_uris.extend(DATA_URI_RE.findall(value))
            if '!important' in value:
                stats.important_keywords += 1
            if 'float' in prop:
                stats.float_properties += 1
            if 'font-family' in prop:
                font_families.append(IMPORTANT_RE.sub('', value).strip())
            if 'font-size' in prop:
                font_sizes.append(IMPORTANT_RE.sub('', value).strip())
            if prop == 'color':
                colors.append(normalize_color(value))
            properties[prop] += 1

        stats.data_uri_size = len(''.join(data_uris).encode('utf-8'))
        stats.unique_font_families = sorted(unique(font_families))
        stats.unique_font_sizes = sorted(unique(font_sizes), key=font_size_key)
        stats.unique_colors = sorted(unique(color for color in colors if color not in IGNORED_COLORS))
        stats.properties = sorted((Counted(name, count) for name, count in properties.items()),
                                  key=lambda item: item.count, reverse=True)
        return stats

    @cached_property
    def most_identifier(self) -> Optional[Counted]:
        return take_max(self.selector_stats.identifiers)

    @cached_property
    def lowest_cohesion(self) -> Optional[Counted]:
        return take_max(self.declaration_counts)

    def analyze(self) -> Dict[str, Any]:
        """
        Compute every enabled metric.

        Returns:
            Dict[str, Any]: Metric name to value, in table order
        """
        analysis: Dict[str, Any] = {}
        for metric in METRICS:
            if not all(self.config.enabled(option) for option in metric.options):
                continue
            value = metric.compute(self)
            if value is not SKIP:
                analysis[metric.name] = value
        logger.debug(f"Computed {len(analysis)} metric(s)")
        return analysis


def _simplicity(a: Analyzer) -> Any:
    if not a.selectors:
        return SKIP
    return len(a.rules) / len(a.selectors)


def _ratio_of_data_uri_size(a: Analyzer) -> Any:
    data_uri_size = a.declaration_stats.data_uri_size
    if data_uri_size == 0 or not a.css_size:
        return SKIP
    return data_uri_size / a.css_size


def _counted_field(attribute: str, field: str) -> Callable[[Analyzer], Any]:
    def compute(a: Analyzer) -> Any:
        item = getattr(a, attribute)
        return SKIP if item is None else getattr(item, field)
    return compute


def _properties_count(a: Analyzer) -> Any:
    limit = a.config.properties_limit
    return [{"property": item.label, "count": item.count}
            for item in a.declaration_stats.properties[:limit]]


class Metric(NamedTuple):
    name: str
    compute: Callable[[Analyzer], Any]
    options: Tuple[str, ...]


def _metric(name: str, compute: Callable[[Analyzer], Any], *requires: str) -> Metric:
    return Metric(name, compute, (name,) + requires)


METRICS: Tuple[Metric, ...] = (
    _metric("size", lambda a: a.css_size),
    _metric("dataUriSize", lambda a: a.declaration_stats.data_uri_size),
    _metric("ratioOfDataUriSize", _ratio_of_data_uri_size, "dataUriSize"),
    _metric("gzippedSize", lambda a: gzip_size(a.css_text)),
    _metric("rules", lambda a: len(a.rules)),
    _metric("selectors", lambda a: len(a.selectors)),
    _metric("simplicity", _simplicity, "rules", "selectors"),
    _metric("mostIdentifier", _counted_field("most_identifier", "count")),
    _metric("mostIdentifierSelector", _counted_field("most_identifier", "label")),
    _metric("lowestCohesion", _counted_field("lowest_cohesion", "count")),
    _metric("lowestCohesionSelector", _counted_field("lowest_cohesion", "label")),
    _metric("totalUniqueFontSizes", lambda a: len(a.declaration_stats.unique_font_sizes)),
    _metric("uniqueFontSizes", lambda a: list(a.declaration_stats.unique_font_sizes)),
    _metric("totalUniqueFontFamilies", lambda a: len(a.declaration_stats.unique_font_families)),
    _metric("uniqueFontFamilies", lambda a: list(a.declaration_stats.unique_font_families)),
    _metric("totalUniqueColors", lambda a: len(a.declaration_stats.unique_colors)),
    _metric("uniqueColors", lambda a: list(a.declaration_stats.unique_colors)),
    _metric("idSelectors", lambda a: a.selector_stats.id_selectors),
    _metric("universalSelectors", lambda a: a.selector_stats.universal_selectors),
    _metric("unqualifiedAttributeSelectors", lambda a: a.selector_stats.unqualified_attribute_selectors),
    _metric("javascriptSpecificSelectors", lambda a: a.selector_stats.javascript_specific_selectors),
    _metric("userSpecifiedSelectors", lambda a: a.selector_stats.user_specified_selectors),
    _metric("importantKeywords", lambda a: a.declaration_stats.important_keywords),
    _metric("floatProperties", lambda a: a.declaration_stats.float_properties),
    _metric("propertiesCount", _properties_count),
)
