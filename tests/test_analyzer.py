"""Tests for the statistics engine."""

import gzip

import pytest

from stylestats.core.analyzer import (
    METRICS,
    Analyzer,
    Counted,
    count_identifiers,
    font_size_key,
    gzip_size,
    normalize_color,
    normalize_selector,
    take_max,
)
from stylestats.parser.css_parser import Declaration, Rule, RuleExtractor
from stylestats.utils.config import Config


def analyze(css, **options):
    extracted = RuleExtractor().extract(css)
    analyzer = Analyzer(extracted.rules, extracted.selectors, extracted.declarations,
                        css, len(css.encode("utf-8")), Config(options))
    return analyzer.analyze()


def only(*names, **extra):
    """Options enabling nothing but the given metrics."""
    options = {metric.name: False for metric in METRICS}
    options.update({name: True for name in names})
    options.update(extra)
    return options


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestSelectorComplexity:
    def test_normalize_collapses_combinator_spaces(self):
        assert normalize_selector(".a .b > .c") == ".a .b>.c"
        assert normalize_selector("a + b ~ c") == "a+b~c"
        assert normalize_selector("a\n\t b") == "a b"

    def test_normalize_collapses_spaces_around_pipes(self):
        assert normalize_selector("[lang |= en]") == "[lang|= en]"
        assert normalize_selector("svg | rect") == "svg|rect"

    def test_descendant_and_child_chain(self):
        assert count_identifiers(".a .b > .c") == 3

    def test_qualified_class_and_id(self):
        assert count_identifiers("a.b") == 2
        assert count_identifiers("div#main") == 2

    def test_attribute_and_pseudo(self):
        assert count_identifiers("input[type=text]") == 2
        assert count_identifiers("a:hover") == 2

    def test_single_simple_selector(self):
        assert count_identifiers(".a") == 1


class TestTakeMax:
    def test_first_occurrence_wins_ties(self):
        items = [Counted("a", 1), Counted("b", 3), Counted("c", 3)]
        assert take_max(items) == Counted("b", 3)

    def test_input_is_not_mutated(self):
        items = [Counted("a", 2), Counted("b", 1)]
        take_max(items)
        take_max(items)
        assert items == [Counted("a", 2), Counted("b", 1)]

    def test_empty(self):
        assert take_max([]) is None


class TestNormalizers:
    def test_color_shorthand_is_expanded(self):
        assert normalize_color("#abc") == "#AABBCC"

    def test_color_important_is_stripped(self):
        assert normalize_color(" red !important ") == "RED"

    def test_non_hex_shorthand_untouched(self):
        assert normalize_color("#abcd") == "#ABCD"

    def test_font_size_key(self):
        assert font_size_key("12px") == 12.0
        assert font_size_key("1.5em") == 1.5
        assert font_size_key("small") == 0.0

    def test_gzip_size(self):
        text = "a{color:red}" * 50
        assert gzip_size(text) == len(gzip.compress(text.encode("utf-8"), compresslevel=9))


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class TestSizeMetrics:
    def test_counts_and_simplicity(self):
        result = analyze("a, b { x: 1 } c { y: 2 }")
        assert result["rules"] == 2
        assert result["selectors"] == 3
        assert result["simplicity"] == 2 / 3

    def test_simplicity_requires_rules_and_selectors(self):
        result = analyze("a { x: 1 }", **only("simplicity", "selectors"))
        assert "simplicity" not in result
        assert result == {"selectors": 1}

    def test_size_is_document_size(self):
        css = "a { content: 'é' }"
        assert analyze(css)["size"] == len(css.encode("utf-8"))

    def test_gzipped_size_is_off_by_default(self):
        assert "gzippedSize" not in analyze("a { x: 1 }")
        assert analyze("a { x: 1 }", gzippedSize=True)["gzippedSize"] > 0


class TestCohesion:
    def test_densest_rule(self):
        result = analyze("a { x: 1 } b, i { x: 1; y: 2; z: 3 } c { x: 1; y: 2 }")
        assert result["lowestCohesion"] == 3
        assert result["lowestCohesionSelector"] == "b, i"

    def test_first_rule_wins_ties(self):
        result = analyze("a { x: 1; y: 2 } b { x: 1; y: 2 }")
        assert result["lowestCohesionSelector"] == "a"

    def test_rules_without_declarations_are_skipped(self):
        result = analyze("a {} b {}")
        assert "lowestCohesion" not in result
        assert "lowestCohesionSelector" not in result


class TestSelectorMetrics:
    def test_most_identifier(self):
        result = analyze(".a { x: 1 } .a .b > .c { x: 1 } .d .e .f { x: 1 }")
        assert result["mostIdentifier"] == 3
        assert result["mostIdentifierSelector"] == ".a .b > .c"

    def test_most_identifier_is_a_maximum(self):
        selectors = ["a", "ul li a:hover", "div.x > p + span", "#id"]
        analyzer = Analyzer([Rule(selectors, [])], selectors, [], "", 0, Config())
        result = analyzer.analyze()
        assert all(result["mostIdentifier"] >= count_identifiers(s) for s in selectors)

    def test_classification_counts(self):
        css = "#a { x: 1 } * { x: 1 } [type=text] { x: 1 } .is-js-x { x: 1 } #jsToggle { x: 1 }"
        result = analyze(css)
        assert result["idSelectors"] == 2
        assert result["universalSelectors"] == 1
        assert result["unqualifiedAttributeSelectors"] == 1
        assert result["javascriptSpecificSelectors"] == 2

    def test_user_specified_pattern(self):
        result = analyze(".u-hook { x: 1 } .other { x: 1 }", userSpecifiedSelectors="^\\.u-")
        assert result["userSpecifiedSelectors"] == 1

    def test_user_specified_disabled_by_default(self):
        assert "userSpecifiedSelectors" not in analyze(".u-hook { x: 1 }")


class TestDeclarationMetrics:
    def test_unique_colors_merge_shorthand(self):
        assert analyze("a{color:#fff;color:#FFFFFF}")["uniqueColors"] == ["#FFFFFF"]

    def test_unique_colors_drop_keywords_and_other_properties(self):
        css = ("a { color: transparent; color: inherit; color: Red !important; "
               "background-color: blue; border-color: green; color: #abc }")
        result = analyze(css)
        assert result["uniqueColors"] == ["#AABBCC", "RED"]
        assert result["totalUniqueColors"] == 2

    def test_unique_font_sizes_sorted_numerically(self):
        css = "a { font-size: 12px } b { font-size: 1.5em } c { font-size: 12px !important } d { font-size: 9px }"
        result = analyze(css)
        assert result["uniqueFontSizes"] == ["1.5em", "9px", "12px"]
        assert result["totalUniqueFontSizes"] == 3

    def test_unique_font_families_sorted(self):
        css = "a { font-family: Verdana } b { font-family: Arial !important } c { font-family: Arial }"
        result = analyze(css)
        assert result["uniqueFontFamilies"] == ["Arial", "Verdana"]

    def test_data_uri_size_counts_only_the_payload(self):
        result = analyze("a { background: url(data:image/png;base64,AAAA); color: red }")
        assert result["dataUriSize"] == len("data:image/png;base64,AAAA")

    def test_ratio_of_data_uri_size(self):
        css = "a { background: url(data:image/png;base64,AAAA) }"
        result = analyze(css)
        assert result["ratioOfDataUriSize"] == len("data:image/png;base64,AAAA") / len(css)

    def test_no_ratio_without_data_uri(self):
        result = analyze("a { color: red }")
        assert result["dataUriSize"] == 0
        assert "ratioOfDataUriSize" not in result

    def test_important_and_float(self):
        css = "a { float: left; color: red !important } b { -webkit-float: none; margin: 0!important }"
        result = analyze(css)
        assert result["importantKeywords"] == 2
        assert result["floatProperties"] == 2

    def test_properties_count_top_n(self):
        css = "a { color: red; margin: 0 } b { margin: 1px; padding: 0 } c { margin: 0; padding: 0 }"
        result = analyze(css, propertiesCount=2)
        assert result["propertiesCount"] == [
            {"property": "margin", "count": 3},
            {"property": "padding", "count": 2},
        ]

    def test_properties_count_ties_keep_first_seen_order(self):
        result = analyze("a { top: 0; left: 0 }")
        assert [item["property"] for item in result["propertiesCount"]] == ["top", "left"]


# ---------------------------------------------------------------------------
# Record behaviour
# ---------------------------------------------------------------------------


class TestRecord:
    def test_disabled_metrics_are_absent(self):
        result = analyze("a { color: red }", **only("rules"))
        assert result == {"rules": 1}

    def test_disabled_analyses_are_not_computed(self):
        extracted = RuleExtractor().extract("a { color: red }")
        analyzer = Analyzer(extracted.rules, extracted.selectors, extracted.declarations,
                            "", 0, Config(only("rules")))
        analyzer.analyze()
        assert "declaration_stats" not in analyzer.__dict__
        assert "selector_stats" not in analyzer.__dict__

    def test_analysis_is_idempotent(self):
        rules = [Rule(["a", ".b .c"], [Declaration("color", "#fff"), Declaration("float", "left")]),
                 Rule(["#d"], [Declaration("font-size", "12px")])]
        selectors = ["a", ".b .c", "#d"]
        declarations = [d for rule in rules for d in rule.declarations]
        analyzer = Analyzer(rules, selectors, declarations, "x", 1, Config())
        first = analyzer.analyze()
        second = analyzer.analyze()
        third = Analyzer(rules, selectors, declarations, "x", 1, Config()).analyze()
        assert first == second == third

    def test_record_order_follows_metric_table(self):
        result = analyze("a { color: red }")
        names = [metric.name for metric in METRICS]
        assert list(result) == [name for name in names if name in result]

    @pytest.mark.parametrize("name", ["size", "rules", "selectors", "uniqueColors"])
    def test_each_metric_toggles_independently(self, name):
        assert list(analyze("a { color: red }", **only(name))) == [name]
