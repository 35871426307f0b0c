"""End-to-end tests for the StyleStats engine."""

from datetime import datetime

import pytest

from stylestats import StyleStats
from stylestats.errors import InputError, ParseError, TransportError
from stylestats.utils.config import Config

from conftest import make_response

APP_CSS = """
.header { color: #fff; float: left; }
#main .nav > li { color: #FFFFFF; font-size: 14px !important; }
@media (max-width: 600px) {
  .header { display: none; }
}
"""


@pytest.fixture
def app_css(tmp_path):
    path = tmp_path / "app.css"
    path.write_text(APP_CSS, encoding="utf-8")
    return str(path)


class TestRecord:
    def test_local_file(self, app_css):
        record = StyleStats(app_css).parse()

        datetime.fromisoformat(record["published"])
        assert record["paths"] == [app_css]
        assert record["stylesheets"] == 1
        assert "styleElements" not in record
        assert record["size"] == len(APP_CSS.encode("utf-8"))
        assert record["rules"] == 3
        assert record["selectors"] == 3
        assert record["simplicity"] == 1.0
        assert record["mostIdentifierSelector"] == "#main .nav > li"
        assert record["uniqueColors"] == ["#FFFFFF"]
        assert record["floatProperties"] == 1
        assert record["importantKeywords"] == 1
        assert record["idSelectors"] == 1
        assert record["mediaQueries"] == 1

    def test_record_key_order(self, app_css):
        keys = list(StyleStats(app_css).parse())
        assert keys[:4] == ["published", "paths", "stylesheets", "size"]
        assert keys[-1] == "mediaQueries"

    def test_inline_css_has_no_paths(self):
        record = StyleStats(["a { color: red }"]).parse()
        assert record["paths"] == []
        assert record["stylesheets"] == 0
        assert record["rules"] == 1

    def test_options_disable_entries(self, app_css):
        config = {"published": False, "paths": False, "mediaQueries": False, "size": False}
        record = StyleStats(app_css, config).parse()
        for key in config:
            assert key not in record

    def test_config_object_and_file(self, app_css, tmp_path):
        options = tmp_path / "options.json"
        options.write_text('{"gzippedSize": true}', encoding="utf-8")
        assert "gzippedSize" in StyleStats(app_css, str(options)).parse()
        assert "gzippedSize" in StyleStats(app_css, Config({"gzippedSize": True})).parse()

    def test_web_page(self, fake_fetcher):
        page = ('<html><head><link rel="stylesheet" href="site.css">'
                '<style>.a { color: red }</style></head></html>')
        fetcher, _ = fake_fetcher({
            "https://example.com/": make_response("https://example.com/", page, "text/html"),
            "https://example.com/site.css": make_response("https://example.com/site.css", ".b { top: 0 }"),
        })
        record = StyleStats("https://example.com/", fetcher=fetcher).parse()

        assert record["paths"] == ["https://example.com/"]
        assert record["stylesheets"] == 1
        assert record["styleElements"] == 1
        assert record["rules"] == 2

    def test_repeated_parse_builds_fresh_records(self, app_css):
        stats = StyleStats(app_css)
        first = stats.parse()
        second = stats.parse()
        first.pop("published")
        second.pop("published")
        assert first == second


class TestFailures:
    def test_no_usable_argument(self, tmp_path):
        with pytest.raises(InputError):
            StyleStats([str(tmp_path / "nothing-here.css")]).parse()

    def test_malformed_file_fails_the_whole_run(self, tmp_path):
        broken = tmp_path / "broken.css"
        broken.write_text("a { color red }", encoding="utf-8")
        with pytest.raises(ParseError):
            StyleStats([str(broken), ".ok { top: 0 }"]).parse()

    def test_transport_failure_yields_no_record(self, fake_fetcher):
        url = "https://example.com/gone.css"
        fetcher, _ = fake_fetcher({url: make_response(url, "", status=404)})
        with pytest.raises(TransportError):
            StyleStats([url, "a { x: 1 }"], fetcher=fetcher).parse()
