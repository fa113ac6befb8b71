"""OpenAPI document parser -- load, resolve ``$ref`` pointers, and build the API model.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML, local file
or remote URL) into the immutable :class:`~dummy.models.API` that the request
matcher consumes.

Typical usage::

    from dummy.generator import ValueGenerator
    from dummy.parser import load_api

    api = load_api("https://example.com/openapi.yml", ValueGenerator())

Sub-modules:

* :mod:`~dummy.parser.loader` -- I/O layer (URL, file, stdin), format
  detection, version check, and validation into the raw document model.
* :mod:`~dummy.parser.resolver` -- Recursive schema resolution with
  cyclic-reference detection.
* :mod:`~dummy.parser.builder` -- Walks the paths and produces
  :class:`~dummy.models.Operation` objects.
"""

from dummy.generator import ValueGenerator
from dummy.models import API
from dummy.parser.builder import build_api
from dummy.parser.loader import load_document, load_spec, parse_document, validate_openapi_version
from dummy.parser.resolver import resolve_schema


def load_api(source: str, generator: ValueGenerator) -> API:
    """Load the document at *source* and build its API model in one step."""
    return build_api(load_document(source), generator)


__all__ = [
    "build_api",
    "load_api",
    "load_document",
    "load_spec",
    "parse_document",
    "resolve_schema",
    "validate_openapi_version",
]
