"""Load OpenAPI documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw OpenAPI documents and converting
them into a validated :class:`~dummy.models.OpenAPIDocument`.  It supports
both JSON and YAML with automatic format detection, and rejects documents
that do not declare OpenAPI 3.x.

The public functions are:

* :func:`load_spec` -- Load and deserialize a document from any source.
* :func:`validate_openapi_version` -- Check and return the ``openapi`` version.
* :func:`parse_document` -- Validate the raw dict into the raw document model.
* :func:`load_document` -- All three steps in one call.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from dummy.exceptions import DeserializationError, DocumentAcquisitionError, SpecParseError
from dummy.models import OpenAPIDocument


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The deserialized document as a dictionary.

    Raises:
        DocumentAcquisitionError: If the bytes cannot be read.
        DeserializationError: If the content is neither JSON nor YAML.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise DocumentAcquisitionError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DocumentAcquisitionError("No input received from stdin")

    return _parse_content(content)


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S), using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DocumentAcquisitionError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DocumentAcquisitionError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local document; ``.json``/``.yaml``/``.yml`` select the parser."""
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentAcquisitionError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentAcquisitionError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise DocumentAcquisitionError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML, since
    valid JSON is also valid YAML but JSON parsing is stricter.

    Raises:
        DeserializationError: If the content cannot be parsed as either
            format, or does not hold a mapping at the top level.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise DeserializationError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise DeserializationError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise DeserializationError(
            "Spec must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Raises:
        SpecParseError: For Swagger 2.x, a missing ``openapi`` field, or a
            version outside 3.x.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can be mocked."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(openapi_version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
        )
    return version_str


def parse_document(raw: dict[str, Any]) -> OpenAPIDocument:
    """Validate a deserialized dict into an :class:`~dummy.models.OpenAPIDocument`.

    Raises:
        DeserializationError: If the dict does not have the shape of an
            OpenAPI document (e.g. ``paths`` is a list).
    """
    try:
        return OpenAPIDocument.model_validate(raw)
    except ValidationError as exc:
        raise DeserializationError(f"Invalid OpenAPI document: {exc}") from exc


def load_document(source: str) -> OpenAPIDocument:
    """Load, version-check, and validate the document at *source*."""
    raw = load_spec(source)
    validate_openapi_version(raw)
    return parse_document(raw)
