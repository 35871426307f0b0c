"""Tests for argument classification."""

import logging
import os

import pytest

from stylestats.sources import Source
from stylestats.utils.classifier import classify, classify_argument, is_url


@pytest.fixture
def styles_dir(tmp_path):
    for name in ("b.css", "a.less", "c.styl", "notes.txt", "d.stylus"):
        (tmp_path / name).write_text("a { x: 1 }", encoding="utf-8")
    (tmp_path / "nested.css").mkdir()
    return tmp_path


class TestIsUrl:
    @pytest.mark.parametrize("value", ["http://example.com", "https://example.com/a.css?v=1"])
    def test_urls(self, value):
        assert is_url(value)

    @pytest.mark.parametrize("value", ["ftp://example.com/a.css", "https://", "example.com", "a.css"])
    def test_not_urls(self, value):
        assert not is_url(value)


class TestClassifyArgument:
    def test_file(self, styles_dir):
        path = str(styles_dir / "b.css")
        assert classify_argument(path) == [Source.file(path)]

    def test_file_with_unsupported_extension_is_not_a_file(self, styles_dir, caplog):
        with caplog.at_level(logging.WARNING, logger="stylestats"):
            assert classify_argument(str(styles_dir / "notes.txt")) == []
        assert "matches no file" in caplog.text

    def test_directory_lists_supported_files_sorted(self, styles_dir):
        sources = classify_argument(str(styles_dir))
        names = [os.path.basename(source.value) for source in sources]
        assert names == ["a.less", "b.css", "c.styl", "d.stylus"]

    def test_url(self):
        assert classify_argument("https://example.com/") == [Source.url("https://example.com/")]

    def test_css_text(self):
        assert classify_argument("a { color: red }") == [Source.inline("a { color: red }")]

    def test_glob_only_matches_css(self, styles_dir):
        sources = classify_argument(str(styles_dir / "*"))
        assert sources == [Source.file(str(styles_dir / "b.css"))]

    def test_unmatched_argument_is_dropped(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="stylestats"):
            assert classify_argument(str(tmp_path / "missing-*.css")) == []
        assert "matches no file" in caplog.text


class TestClassify:
    def test_kinds_keep_input_order(self, styles_dir):
        args = [
            "https://b.example.com/",
            str(styles_dir / "b.css"),
            ".x { y: 1 }",
            "https://a.example.com/",
            str(styles_dir / "a.less"),
        ]
        result = classify(args)
        assert result.files == [str(styles_dir / "b.css"), str(styles_dir / "a.less")]
        assert result.urls == ["https://b.example.com/", "https://a.example.com/"]
        assert result.styles == [".x { y: 1 }"]
        assert not result.is_empty()

    def test_single_string(self):
        assert classify("a { x: 1 }").styles == ["a { x: 1 }"]

    def test_nothing_usable(self, tmp_path):
        assert classify([str(tmp_path / "none.css")]).is_empty()


def test_sources_are_immutable():
    source = Source.file("a.css")
    with pytest.raises(AttributeError):
        source.value = "b.css"
    assert source == Source.file("a.css")
    assert len({source, Source.file("a.css"), Source.url("a.css")}) == 2
