"""
CSS rule extraction.
This module turns the merged stylesheet text into flat rule, selector and
declaration collections for the statistics engine.
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

import cssutils
import tinycss2

from stylestats.errors import ParseError

# Suppress cssutils warning logs - the sniff test parses arbitrary text
cssutils.log.setLevel(logging.CRITICAL)

logger = logging.getLogger(__name__)


class Declaration:
    """A single ``property: value`` pair."""

    __slots__ = ("property", "value")

    def __init__(self, property: str, value: str):
        self.property = property
        self.value = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, Declaration):
            return NotImplemented
        return self.property == other.property and self.value == other.value

    def __repr__(self) -> str:
        return f"Declaration({self.property!r}, {self.value!r})"


class Rule:
    """A style rule: its selectors and its declarations, both in source order."""

    __slots__ = ("selectors", "declarations")

    def __init__(self, selectors: List[str], declarations: List[Declaration]):
        self.selectors = selectors
        self.declarations = declarations

    @property
    def selector_text(self) -> str:
        return ", ".join(self.selectors)

    def __repr__(self) -> str:
        return f"Rule({self.selectors!r}, {len(self.declarations)} declaration(s))"


class ExtractedStyles:
    """
    Flattened view of a parsed document.

    Attributes:
        rules: Style rules, including those un-nested from ``@media`` blocks
        selectors: Every selector of every rule, in order
        declarations: Every declaration of every rule, in order
        media_queries: Number of ``@media`` blocks seen at top level
    """

    def __init__(self, rules: List[Rule], media_queries: int = 0):
        self.rules = rules
        self.media_queries = media_queries
        self.selectors = [selector for rule in rules for selector in rule.selectors]
        self.declarations = [declaration for rule in rules for declaration in rule.declarations]


class RuleExtractor:
    """Rule extractor built on the tinycss2 grammar parser."""

    def __init__(self, source: Optional[str] = None):
        """
        Initialize the extractor.

        Args:
            source: Label of the document, used in error messages
        """
        self.source = source

    def extract(self, css_text: str) -> ExtractedStyles:
        """
        Parse CSS text and flatten it into rules.

        Args:
            css_text: The merged stylesheet

        Returns:
            ExtractedStyles: Rules, selectors, declarations and media count

        Raises:
            ParseError: If the text is malformed or contains no rule
        """
        # tinycss2 closes open constructs at end of input without reporting it
        check_closed(css_text, source=self.source)
        nodes = tinycss2.parse_stylesheet(css_text, skip_comments=True, skip_whitespace=True)

        rules: List[Rule] = []
        media_queries = 0

        for node in nodes:
            self._check(node)
            if node.type == 'qualified-rule':
                rules.append(self._build_rule(node))
            elif node.type == 'at-rule' and node.lower_at_keyword == 'media' and node.content is not None:
                media_queries += 1
                children = tinycss2.parse_rule_list(node.content, skip_comments=True, skip_whitespace=True)
                for child in children:
                    self._check(child)
                    # One level of un-nesting only
                    if child.type == 'qualified-rule':
                        rules.append(self._build_rule(child))

        if not rules:
            raise ParseError("no rule found", source=self.source)

        logger.debug(f"Extracted {len(rules)} rule(s) and {media_queries} media query block(s)")
        return ExtractedStyles(rules, media_queries)

    def _check(self, node) -> None:
        if node.type == 'error':
            raise ParseError(
                f"Invalid CSS at line {node.source_line}, column {node.source_column}: {node.message}",
                source=self.source, line=node.source_line, column=node.source_column)

    def _build_rule(self, node) -> Rule:
        selectors = split_selectors(node.prelude)
        if any(not selector for selector in selectors):
            raise ParseError(
                f"selector missing at line {node.source_line}, column {node.source_column}",
                source=self.source, line=node.source_line, column=node.source_column)

        declarations = []
        for item in tinycss2.parse_declaration_list(node.content, skip_comments=True, skip_whitespace=True):
            self._check(item)
            if item.type != 'declaration':
                continue
            value = tinycss2.serialize(item.value).strip()
            if item.important:
                value = f"{value} !important"
            declarations.append(Declaration(item.lower_name, value))

        return Rule(selectors, declarations)


BRACKETS = {'{': '}', '(': ')', '[': ']'}
URL_START_RE = re.compile(r'(?<![\w-])url\(\s*(?![\s"\'])', re.IGNORECASE)


def _position(text: str, index: int) -> Tuple[int, int]:
    line = text.count('\n', 0, index) + 1
    column = index - text.rfind('\n', 0, index)
    return line, column


def check_closed(css_text: str, source: Optional[str] = None) -> None:
    """
    Reject text in which a block, function, comment or string is still open
    at end of input.

    Closers follow the CSS nesting rules: a closer only ends the innermost
    open construct when it matches it. Stray closers are left to the grammar
    parser.

    Raises:
        ParseError: Naming the position of the construct left open
    """
    def fail(message: str, index: int) -> None:
        line, column = _position(css_text, index)
        raise ParseError(f"{message} at line {line}, column {column}",
                         source=source, line=line, column=column)

    stack: List[Tuple[str, int]] = []
    length = len(css_text)
    i = 0
    while i < length:
        c = css_text[i]

        if css_text.startswith('/*', i):
            end = css_text.find('*/', i + 2)
            if end == -1:
                fail("End of comment missing", i)
            i = end + 2
            continue

        if c == '\\':
            i += 2
            continue

        if c in '"\'':
            start = i
            i += 1
            while i < length and css_text[i] != c:
                if css_text[i] == '\\':
                    i += 1
                elif css_text[i] == '\n':
                    fail("unterminated string", start)
                i += 1
            if i >= length:
                fail("unterminated string", start)
            i += 1
            continue

        match = URL_START_RE.match(css_text, i) if c in 'uU' else None
        if match:
            end = css_text.find(')', match.end())
            if end == -1:
                fail("missing ')'", i)
            i = end + 1
            continue

        if c in BRACKETS:
            stack.append((c, i))
        elif stack and c == BRACKETS[stack[-1][0]]:
            stack.pop()
        i += 1

    if stack:
        opener, index = stack[-1]
        fail(f"missing '{BRACKETS[opener]}'", index)


def split_selectors(prelude: Iterable) -> List[str]:
    """
    Split a rule prelude into selector strings on top-level commas.

    Commas nested inside functions such as ``:is(a, b)`` are kept.
    """
    groups: List[list] = [[]]
    for token in prelude:
        if token.type == 'literal' and token.value == ',':
            groups.append([])
        else:
            groups[-1].append(token)
    return [tinycss2.serialize(group).strip() for group in groups]


def looks_like_css(text: str) -> bool:
    """
    Structural CSS sniff test.

    Args:
        text: Arbitrary text (an argument or a response body)

    Returns:
        bool: True if a lenient parse finds at least one style rule
    """
    if not text or not text.strip():
        return False

    parser = cssutils.CSSParser(validate=False, raiseExceptions=False)
    try:
        sheet = parser.parseString(text)
    except Exception as e:
        logger.debug(f"CSS sniff parse failed: {e}")
        return False

    for rule in sheet.cssRules:
        if rule.type == cssutils.css.CSSRule.STYLE_RULE:
            return True
        if rule.type == cssutils.css.CSSRule.MEDIA_RULE:
            if any(child.type == cssutils.css.CSSRule.STYLE_RULE for child in rule.cssRules):
                return True
    return False
