"""Tests for cliweb.definition.loader -- reading definitions from files, URLs and stdin."""

from __future__ import annotations

import io
import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from cliweb.definition.loader import _parse_content, load_definition
from cliweb.exceptions import DefinitionError

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# Format detection
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_json(self) -> None:
        assert _parse_content('{"name": "calc"}') == {"name": "calc"}

    def test_yaml(self) -> None:
        assert _parse_content("name: calc\nshort: hi\n") == {"name": "calc", "short": "hi"}

    def test_yaml_hint_skips_json(self) -> None:
        assert _parse_content('{"name": "calc"}', hint="yaml") == {"name": "calc"}

    def test_invalid_json_with_json_hint(self) -> None:
        with pytest.raises(DefinitionError, match="Invalid JSON"):
            _parse_content("{not json", hint="json")

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(DefinitionError, match="must be a JSON/YAML object"):
            _parse_content("- a\n- b\n")

    def test_unparsable(self) -> None:
        with pytest.raises(DefinitionError, match="Failed to parse"):
            _parse_content("key: [unclosed")


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class TestLoadDefinition:
    def test_yaml_file(self) -> None:
        data = load_definition(str(FIXTURES_DIR / "calc.yaml"))
        assert data["name"] == "calc"
        assert [c["name"] for c in data["commands"]] == ["add", "sum", "tools"]

    def test_json_file(self) -> None:
        data = load_definition(str(FIXTURES_DIR / "calc.json"))
        assert data["commands"][0]["runner"] == "calc_runners:add"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DefinitionError, match="not found"):
            load_definition(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("  \n")
        with pytest.raises(DefinitionError, match="empty"):
            load_definition(str(path))

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("name: piped\n"))
        assert load_definition("-") == {"name": "piped"}

    def test_empty_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(DefinitionError, match="No input"):
            load_definition("-")

    def test_url(self) -> None:
        url = "https://example.com/calc.json"
        response = httpx.Response(
            200,
            text=json.dumps({"name": "remote"}),
            headers={"content-type": "application/json"},
            request=httpx.Request("GET", url),
        )
        with patch("cliweb.definition.loader.httpx.get", return_value=response) as get:
            assert load_definition(url) == {"name": "remote"}
        get.assert_called_once()

    def test_url_http_error(self) -> None:
        url = "https://example.com/missing.yaml"
        response = httpx.Response(404, text="nope", request=httpx.Request("GET", url))
        with patch("cliweb.definition.loader.httpx.get", return_value=response):
            with pytest.raises(DefinitionError, match="HTTP 404"):
                load_definition(url)

    def test_url_connection_error(self) -> None:
        url = "https://example.invalid/calc.yaml"
        error = httpx.ConnectError("no route", request=httpx.Request("GET", url))
        with patch("cliweb.definition.loader.httpx.get", side_effect=error):
            with pytest.raises(DefinitionError, match="Failed to fetch"):
                load_definition(url)
