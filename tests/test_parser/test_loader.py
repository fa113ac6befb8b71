"""Tests for dummy.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from dummy.exceptions import DeserializationError, DocumentAcquisitionError, SpecParseError
from dummy.generator import ValueGenerator
from dummy.models import OpenAPIDocument
from dummy.parser import load_api
from dummy.parser.loader import (
    _parse_content,
    load_document,
    load_spec,
    parse_document,
    validate_openapi_version,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# load_spec dispatch
# ---------------------------------------------------------------------------


class TestLoadSpec:
    """Test load_spec dispatcher routes to the correct loader."""

    def test_loads_from_file_json(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "examples.json"))
        assert result["openapi"] == "3.0.3"
        assert result["info"]["title"] == "Examples API"

    def test_loads_from_file_yaml(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "users.yml"))
        assert result["info"]["title"] == "Users API"
        assert set(result["paths"]) == {"/users", "/users/{userId}"}

    def test_loads_from_stdin(self) -> None:
        spec_json = json.dumps({"openapi": "3.0.3", "info": {"title": "stdin test"}})
        with patch("dummy.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(spec_json)
            result = load_spec("-")
        assert result["info"]["title"] == "stdin test"

    def test_empty_stdin_raises(self) -> None:
        with patch("dummy.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("   \n")
            with pytest.raises(DocumentAcquisitionError, match="No input"):
                load_spec("-")

    def test_loads_from_url(self) -> None:
        spec = {"openapi": "3.0.3", "info": {"title": "URL test"}}
        mock_response = httpx.Response(
            status_code=200,
            json=spec,
            request=httpx.Request("GET", "https://example.com/openapi.json"),
        )
        with patch("dummy.parser.loader.httpx.get", return_value=mock_response) as mock_get:
            result = load_spec("https://example.com/openapi.json")
        mock_get.assert_called_once()
        assert result["info"]["title"] == "URL test"

    def test_url_yaml_content_type(self) -> None:
        mock_response = httpx.Response(
            status_code=200,
            text="openapi: 3.0.3\ninfo:\n  title: YAML over HTTP\n",
            headers={"content-type": "application/yaml"},
            request=httpx.Request("GET", "https://example.com/openapi.yml"),
        )
        with patch("dummy.parser.loader.httpx.get", return_value=mock_response):
            result = load_spec("https://example.com/openapi.yml")
        assert result["info"]["title"] == "YAML over HTTP"

    def test_url_http_error(self) -> None:
        mock_response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("dummy.parser.loader.httpx.get", return_value=mock_response):
            with pytest.raises(DocumentAcquisitionError, match="HTTP 404"):
                load_spec("https://example.com/missing.json")

    def test_url_connection_error(self) -> None:
        with patch(
            "dummy.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("connection refused"),
        ):
            with pytest.raises(DocumentAcquisitionError, match="Failed to fetch"):
                load_spec("http://localhost:1/openapi.json")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentAcquisitionError, match="not found"):
            load_spec(str(tmp_path / "nope.yml"))

    def test_empty_file(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.yml"
        empty.write_text("\n", encoding="utf-8")
        with pytest.raises(DocumentAcquisitionError, match="empty"):
            load_spec(str(empty))

    def test_acquisition_error_is_spec_parse_error(self, tmp_path: Path) -> None:
        with pytest.raises(SpecParseError):
            load_spec(str(tmp_path / "nope.json"))


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_json_without_hint(self) -> None:
        assert _parse_content('{"openapi": "3.0.0"}') == {"openapi": "3.0.0"}

    def test_yaml_fallback_without_hint(self) -> None:
        content = textwrap.dedent("""\
            openapi: 3.0.0
            paths: {}
        """)
        assert _parse_content(content) == {"openapi": "3.0.0", "paths": {}}

    def test_json_hint_rejects_yaml(self) -> None:
        with pytest.raises(DeserializationError, match="Invalid JSON"):
            _parse_content("openapi: 3.0.0", hint="json")

    def test_unparseable_content(self) -> None:
        with pytest.raises(DeserializationError, match="JSON or YAML"):
            _parse_content("{not: [valid")

    def test_top_level_must_be_mapping(self) -> None:
        with pytest.raises(DeserializationError, match="object"):
            _parse_content("[1, 2, 3]")


# ---------------------------------------------------------------------------
# validate_openapi_version
# ---------------------------------------------------------------------------


class TestValidateOpenAPIVersion:
    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0"])
    def test_accepts_3x(self, version: str) -> None:
        assert validate_openapi_version({"openapi": version}) == version

    def test_rejects_swagger(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0"):
            validate_openapi_version({"swagger": "2.0"})

    def test_rejects_missing_version(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi'"):
            validate_openapi_version({"info": {}})

    def test_rejects_other_major(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported"):
            validate_openapi_version({"openapi": "4.0.0"})


# ---------------------------------------------------------------------------
# parse_document / load_document
# ---------------------------------------------------------------------------


class TestParseDocument:
    def test_returns_document(self, users_raw: dict) -> None:
        document = parse_document(users_raw)
        assert isinstance(document, OpenAPIDocument)
        assert "User" in document.components.schemas

    def test_yaml_integer_status_keys_become_strings(self) -> None:
        document = parse_document(
            {"openapi": "3.0.0", "paths": {"/a": {"get": {"responses": {200: {}}}}}}
        )
        assert list(document.paths["/a"].get.responses) == ["200"]

    def test_wrong_shape_raises_deserialization_error(self) -> None:
        with pytest.raises(DeserializationError, match="Invalid OpenAPI document"):
            parse_document({"openapi": "3.0.0", "paths": ["not", "a", "map"]})

    def test_load_document_end_to_end(self) -> None:
        document = load_document(str(FIXTURES_DIR / "users.yml"))
        assert document.paths["/users"].post is not None

    def test_load_document_rejects_swagger(self, tmp_path: Path) -> None:
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps({"swagger": "2.0", "paths": {}}), encoding="utf-8")
        with pytest.raises(SpecParseError):
            load_document(str(path))


class TestLoadApi:
    def test_users_document(self) -> None:
        api = load_api(str(FIXTURES_DIR / "users.yml"), ValueGenerator(seed=1))
        assert [op.path for op in api.operations] == ["/users", "/users", "/users/{userId}"]
