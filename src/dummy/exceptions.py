"""Exception hierarchy for dummy.

All exceptions inherit from :class:`DummyError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`dummy.exit_codes`.
The top-level error handler in :func:`dummy.app.main` catches
``DummyError`` and exits with the appropriate code.

Request-time failures additionally carry an ``http_status`` so that
:mod:`dummy.server` can answer with a matching status code without
inspecting the concrete exception type.

Subclass hierarchy::

    DummyError (exit 1)
    +-- ConfigError                      (exit 1)
    +-- SpecParseError                   (exit 7)
    |   +-- DocumentAcquisitionError
    |   +-- DeserializationError
    +-- SchemaBuildError                 (exit 8)
    |   +-- ReferenceResolutionError
    |   |   +-- CyclicReferenceError
    |   +-- UnknownSchemaTypeError
    |   +-- EmptyItemsError
    |   +-- ArrayExampleTypeError
    |   +-- ObjectExampleTypeError
    |   +-- StatusCodeParseError
    +-- MatchError
        +-- OperationNotFoundError       (exit 4, HTTP 404)
        +-- RequestBodyDecodeError       (exit 2, HTTP 400)
        +-- MissingRequiredFieldError    (exit 2, HTTP 400)
"""

from __future__ import annotations

from typing import Any

from dummy.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SCHEMA_BUILD_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class DummyError(Exception):
    """Base exception for all dummy errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`dummy.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(DummyError):
    """Raised for configuration problems (invalid ``dummy.json``, bad env values)."""

    exit_code = EXIT_GENERIC_FAILURE


# --- Document loading ---


class SpecParseError(DummyError):
    """Raised when the OpenAPI document cannot be loaded or fails validation."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class DocumentAcquisitionError(SpecParseError):
    """Raised when the document bytes cannot be read from a file, URL, or stdin."""


class DeserializationError(SpecParseError):
    """Raised when the document is not valid JSON/YAML or not a valid OpenAPI shape."""


# --- Build pass ---


class SchemaBuildError(DummyError):
    """Raised when a loaded document cannot be normalized into an API model."""

    exit_code = EXIT_SCHEMA_BUILD_ERROR


class ReferenceResolutionError(SchemaBuildError):
    """Raised when a ``$ref`` is malformed or points at nothing."""

    def __init__(self, reference: str, reason: str = "not found"):
        self.reference = reference
        super().__init__(f"resolve reference {reference!r}: {reason}")


class CyclicReferenceError(ReferenceResolutionError):
    """Raised when a ``$ref`` chain leads back to a reference already being expanded."""

    def __init__(self, reference: str, chain: list[str]):
        self.chain = chain
        super().__init__(reference, "cycle via " + " -> ".join([*chain, reference]))


class UnknownSchemaTypeError(SchemaBuildError):
    """Raised for a schema ``type`` outside boolean/integer/number/string/array/object."""

    def __init__(self, schema_type: str | None):
        self.schema_type = schema_type
        super().__init__(f"unknown type {schema_type!r}")


class EmptyItemsError(SchemaBuildError):
    """Raised when an ``array`` schema does not declare ``items``."""

    def __init__(self) -> None:
        super().__init__("empty items in array")


class ArrayExampleTypeError(SchemaBuildError):
    """Raised when an ``array`` schema's example is not a list."""

    def __init__(self, data: Any):
        self.data = data
        super().__init__(f"unexpected type for array example: {type(data).__name__}")


class ObjectExampleTypeError(SchemaBuildError):
    """Raised when an ``object`` schema's example is not a mapping."""

    def __init__(self, data: Any):
        self.data = data
        if isinstance(data, dict):
            super().__init__("object example keys must be strings")
        else:
            super().__init__(f"unexpected type for object example: {type(data).__name__}")


class StatusCodeParseError(SchemaBuildError):
    """Raised when a response key is not an integer status code (e.g. ``default``)."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"invalid response status code {code!r}")


# --- Request matching ---


class MatchError(DummyError):
    """Base class for failures that abort a single matched request.

    ``http_status`` is the status code the mock server answers with.
    """

    http_status: int = 500


class OperationNotFoundError(MatchError):
    """Raised when no operation matches the request's method and path."""

    exit_code = EXIT_NOT_FOUND
    http_status = 404

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"not specified operation: {method} {path}")


class RequestBodyDecodeError(MatchError):
    """Raised when a write request's body is not a JSON object."""

    exit_code = EXIT_INVALID_USAGE
    http_status = 400


class MissingRequiredFieldError(MatchError):
    """Raised when a required body field is absent from the request."""

    exit_code = EXIT_INVALID_USAGE
    http_status = 400

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"empty require field: {field}")
