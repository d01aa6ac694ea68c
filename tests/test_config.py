"""Tests for request loading (html2epub.config)."""

import json
from pathlib import Path

import pytest

from html2epub.config import load_config_file, load_request, parse_dc_options
from html2epub.errors import ConfigError
from html2epub.models.request import ConversionRequest, OutputFormat


def write_config(tmp_path: Path, data, name: str = "book.json") -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestConversionRequest:
    def test_defaults(self):
        request = ConversionRequest()
        assert request.title == "Untitled"
        assert request.charset == "UTF-8"
        assert request.language == "en"
        assert request.depth == 3
        assert request.headings == "h1,h2,h3,h4,h5,h6"
        assert request.output_format == OutputFormat.EPUB
        assert request.modified.endswith("Z")
        assert len(request.identifier) == 36

    def test_identifiers_are_unique(self):
        assert ConversionRequest().identifier != ConversionRequest().identifier

    def test_aliases(self):
        request = ConversionRequest.model_validate(
            {"keepAllHeadings": True, "outputFile": "x.epub", "format": "json"}
        )
        assert request.keep_all_headings
        assert request.output_file == Path("x.epub")
        assert request.output_format == OutputFormat.JSON

    def test_remote(self):
        assert ConversionRequest(spine=["https://example.com/a.html"]).remote
        assert not ConversionRequest(spine=["a.html"]).remote
        assert not ConversionRequest().remote


class TestParseDcOptions:
    def test_pairs(self):
        assert parse_dc_options(["creator=Lewis Carroll", "dc:publisher=Macmillan"]) == {
            "creator": "Lewis Carroll",
            "publisher": "Macmillan",
        }

    def test_value_may_contain_equals(self):
        assert parse_dc_options(["description=a=b"]) == {"description": "a=b"}

    @pytest.mark.parametrize("option", ["creator", "=value", "bad key=x"])
    def test_invalid(self, option):
        with pytest.raises(ConfigError):
            parse_dc_options([option])


class TestLoadConfigFile:
    def test_aliases_are_normalized(self, tmp_path):
        path = write_config(tmp_path, {"keepAllHeadings": True, "title": "Alice"})
        assert load_config_file(path) == {"keep_all_headings": True, "title": "Alice"}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config_file(path)

    def test_not_an_object(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config_file(write_config(tmp_path, ["a.html"]))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config_file(tmp_path / "missing.json")


class TestLoadRequest:
    def test_command_line_overrides_config(self, tmp_path):
        path = write_config(tmp_path, {"title": "From config", "depth": 2, "language": "fr"})
        request = load_request(path, title="From CLI", depth=None)
        assert request.title == "From CLI"
        assert request.depth == 2
        assert request.language == "fr"

    def test_output_named_after_config(self, tmp_path):
        request = load_request(write_config(tmp_path, {}, name="alice.json"))
        assert request.output_file == Path("alice.epub")

    def test_explicit_output_wins(self, tmp_path):
        path = write_config(tmp_path, {"outputFile": "other.epub"})
        assert load_request(path).output_file == Path("other.epub")
        assert load_request(path, output_file=Path("cli.epub")).output_file == Path("cli.epub")

    def test_dc_options_extend_config(self, tmp_path):
        path = write_config(tmp_path, {"dc": {"creator": "Lewis Carroll"}})
        request = load_request(path, dc_options=["publisher=Macmillan"])
        assert request.dc == {"creator": "Lewis Carroll", "publisher": "Macmillan"}

    def test_invalid_dc_key_in_config(self, tmp_path):
        with pytest.raises(ConfigError):
            load_request(write_config(tmp_path, {"dc": {"not valid": "x"}}))

    def test_sources(self, book_dir):
        request = load_request(sources=[str(book_dir)])
        assert request.basedir == book_dir.resolve()
        assert request.spine == ["chapter1.html", "chapter2.html"]

    def test_sources_relative_to_basedir(self, book_dir):
        request = load_request(sources=["chapter2.html"], basedir=book_dir)
        assert request.spine == ["chapter2.html"]

    def test_no_documents(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(ConfigError):
            load_request(sources=[str(empty)])

    def test_mixed_spine_in_config(self, tmp_path):
        path = write_config(tmp_path, {"spine": ["a.html", "https://example.com/b.html"]})
        with pytest.raises(ConfigError):
            load_request(path)

    def test_validation_errors(self):
        with pytest.raises(ConfigError):
            load_request(depth=0)
        with pytest.raises(ConfigError):
            load_request(output_format="pdf")
