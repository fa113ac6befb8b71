"""Canonical Pydantic models shared across all dummy modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Raw document models** -- the as-parsed OpenAPI 3.x structure, validated
from the dict produced by :mod:`dummy.parser.loader`:
    :class:`RawSchema`, :class:`NamedExample`, :class:`MediaTypeObject`,
    :class:`RawRequestBody`, :class:`RawResponse`, :class:`RawOperation`,
    :class:`PathItem`, :class:`Components`, and :class:`OpenAPIDocument`.

**Normalized API models** -- the reference-free output of the build pass,
consumed by :mod:`dummy.matcher` and :mod:`dummy.server`:
    the :data:`Schema` tagged union (:class:`BooleanSchema`,
    :class:`IntSchema`, :class:`FloatSchema`, :class:`StringSchema`,
    :class:`ArraySchema`, :class:`ObjectSchema`, :class:`FakerSchema`),
    :class:`FieldType`, :class:`Response`, :class:`Operation`, and
    :class:`API`.

**Configuration models** -- :class:`ServerConfig`.

Normalized models are frozen: once :func:`~dummy.parser.builder.build_api`
returns, the API model is shared read-only between request threads.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from dummy.exceptions import ReferenceResolutionError


# --- Raw document models ---


class RawSchema(BaseModel):
    """An OpenAPI *Schema Object*, restricted to the keywords dummy understands.

    A non-empty ``ref`` (the ``$ref`` key) takes precedence over every other
    field. ``faker`` (the ``x-faker`` extension) names a
    :class:`~dummy.generator.ValueGenerator` provider and takes precedence over
    ``type``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ref: str = Field(default="", alias="$ref")
    type: str = ""
    items: Optional[RawSchema] = None
    properties: dict[str, RawSchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    example: Any = None
    faker: str = Field(default="", alias="x-faker")

    @field_validator("type", mode="before")
    @classmethod
    def _first_non_null_type(cls, value: Any) -> Any:
        # OpenAPI 3.1 allows type to be an array (e.g., ["string", "null"])
        if isinstance(value, list):
            non_null = [t for t in value if t != "null"]
            return non_null[0] if non_null else ""
        if value is None:
            return ""
        return value

    @field_validator("properties", "required", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "properties" else []
        return value


class NamedExample(BaseModel):
    """An OpenAPI *Example Object* (``value`` only) or a ``$ref`` to one."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ref: str = Field(default="", alias="$ref")
    value: Any = None


class MediaTypeObject(BaseModel):
    """One entry of a request body's or response's ``content`` map."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    schema_: Optional[RawSchema] = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, NamedExample] = Field(default_factory=dict)


class RawRequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: dict[str, MediaTypeObject] = Field(default_factory=dict)


class RawResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: dict[str, MediaTypeObject] = Field(default_factory=dict)


class RawOperation(BaseModel):
    """An OpenAPI *Operation Object*.

    ``responses`` keeps the document's declaration order. YAML turns bare
    status codes (``200:``) into integers, so keys are normalized to strings
    here and parsed back into integers by the builder.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    request_body: Optional[RawRequestBody] = Field(default=None, alias="requestBody")
    responses: dict[str, RawResponse] = Field(default_factory=dict)

    @field_validator("responses", mode="before")
    @classmethod
    def _status_keys_as_str(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(key): resp for key, resp in value.items()}
        return value


class PathItem(BaseModel):
    """An OpenAPI *Path Item Object*; only the five mockable methods are kept."""

    model_config = ConfigDict(extra="ignore")

    get: Optional[RawOperation] = None
    post: Optional[RawOperation] = None
    put: Optional[RawOperation] = None
    patch: Optional[RawOperation] = None
    delete: Optional[RawOperation] = None


class Components(BaseModel):
    model_config = ConfigDict(extra="ignore")

    schemas: dict[str, RawSchema] = Field(default_factory=dict)
    examples: dict[str, NamedExample] = Field(default_factory=dict)


class OpenAPIDocument(BaseModel):
    """A parsed OpenAPI 3.x document.

    Besides holding the raw structure, the document is the reference-lookup
    capability used by the build pass: :meth:`lookup_by_reference` turns a
    local ``$ref`` such as ``#/components/schemas/User`` into the
    :class:`RawSchema` it names.
    """

    model_config = ConfigDict(extra="ignore")

    openapi: str = "3.0.0"
    info: dict[str, Any] = Field(default_factory=dict)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)

    @field_validator("paths", "components", "info", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("openapi", mode="before")
    @classmethod
    def _version_as_str(cls, value: Any) -> Any:
        return str(value) if value is not None else "3.0.0"

    def lookup_by_reference(self, ref: str) -> RawSchema:
        """Resolve a local schema reference.

        Supports ``#/components/schemas/<Name>`` optionally followed by
        ``/properties/<field>`` and ``/items`` segments. JSON Pointer escaping
        (``~0`` for ``~``, ``~1`` for ``/``) is honoured.

        Raises:
            ReferenceResolutionError: If the reference is external, malformed,
                or points at a schema that does not exist.
        """
        segments = _pointer_segments(ref)
        if len(segments) < 3 or segments[:2] != ["components", "schemas"]:
            raise ReferenceResolutionError(ref, "only #/components/schemas/... is supported")

        name = segments[2]
        if name not in self.components.schemas:
            raise ReferenceResolutionError(ref, f"schema {name!r} not found")
        node = self.components.schemas[name]

        rest = segments[3:]
        while rest:
            head = rest.pop(0)
            if head == "items" and node.items is not None:
                node = node.items
            elif head == "properties" and rest and rest[0] in node.properties:
                node = node.properties[rest.pop(0)]
            else:
                raise ReferenceResolutionError(ref, f"key {head!r} not found at path")
        return node

    def lookup_example(self, ref: str) -> NamedExample:
        """Resolve a ``#/components/examples/<Name>`` reference."""
        segments = _pointer_segments(ref)
        if len(segments) != 3 or segments[:2] != ["components", "examples"]:
            raise ReferenceResolutionError(ref, "only #/components/examples/... is supported")
        if segments[2] not in self.components.examples:
            raise ReferenceResolutionError(ref, f"example {segments[2]!r} not found")
        return self.components.examples[segments[2]]


def _pointer_segments(ref: str) -> list[str]:
    if not ref.startswith("#/"):
        raise ReferenceResolutionError(ref, "external references are not supported")
    return [s.replace("~1", "/").replace("~0", "~") for s in ref[2:].split("/")]


# --- Normalized schema (tagged union) ---


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class BooleanSchema(_FrozenModel):
    kind: Literal["boolean"] = "boolean"
    example: bool = False

    def example_value(self) -> Any:
        return self.example


class IntSchema(_FrozenModel):
    kind: Literal["integer"] = "integer"
    example: int = 0

    def example_value(self) -> Any:
        return self.example


class FloatSchema(_FrozenModel):
    kind: Literal["number"] = "number"
    example: float = 0.0

    def example_value(self) -> Any:
        return self.example


class StringSchema(_FrozenModel):
    kind: Literal["string"] = "string"
    example: str = ""

    def example_value(self) -> Any:
        return self.example


class ArraySchema(_FrozenModel):
    """An array whose elements follow ``items``."""

    kind: Literal["array"] = "array"
    items: Schema
    example: list[Any] = Field(default_factory=list)

    def example_value(self) -> Any:
        """The declared example, or a one-element list built from ``items``."""
        if self.example:
            return self.example
        return [self.items.example_value()]


class ObjectSchema(_FrozenModel):
    """An object with named ``properties``."""

    kind: Literal["object"] = "object"
    properties: dict[str, Schema] = Field(default_factory=dict)
    example: dict[str, Any] = Field(default_factory=dict)

    def example_value(self) -> Any:
        """The declared example, or one assembled from each property's example."""
        if self.example:
            return self.example
        return {name: prop.example_value() for name, prop in self.properties.items()}


class FakerSchema(_FrozenModel):
    """A value produced by the :class:`~dummy.generator.ValueGenerator` at build time."""

    kind: Literal["faker"] = "faker"
    example: Any = None

    def example_value(self) -> Any:
        return self.example


Schema = Annotated[
    Union[
        BooleanSchema,
        IntSchema,
        FloatSchema,
        StringSchema,
        ArraySchema,
        ObjectSchema,
        FakerSchema,
    ],
    Field(discriminator="kind"),
]

ArraySchema.model_rebuild()
ObjectSchema.model_rebuild()


# --- Normalized API ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods dummy can mock, in the order the builder visits them."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


BODY_METHODS = frozenset(m.value for m in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH))
"""Methods whose request body is checked against the operation's required fields."""


class FieldType(_FrozenModel):
    """Requirement and declared type of a single request body field."""

    required: bool = False
    type: str = ""


class Response(_FrozenModel):
    """A canned response for one status code of an :class:`Operation`.

    ``media_type``, ``schema_`` and ``example`` stay empty for responses
    that declare no JSON content. When named examples exist, ``examples[""]``
    holds the value of the alphabetically first one.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: int
    media_type: str = ""
    schema_: Optional[Schema] = Field(default=None, alias="schema")
    example: Any = None
    examples: dict[str, Any] = Field(default_factory=dict)


class Operation(_FrozenModel):
    """One method + path template pair with its body requirements and responses."""

    method: HTTPMethod
    path: str
    body: dict[str, FieldType] = Field(default_factory=dict)
    responses: list[Response] = Field(default_factory=list)


class API(_FrozenModel):
    """The normalized API model handed to the request matcher."""

    operations: list[Operation] = Field(default_factory=list)


# --- Configuration ---


class ServerConfig(BaseModel):
    """Effective settings for ``dummy server``.

    Resolved by :func:`~dummy.config.resolve_config` from CLI flags,
    ``DUMMY_*`` environment variables, ``./dummy.json`` and these defaults.
    """

    spec: Optional[str] = Field(
        default=None, description="URL, file path, or '-' for the OpenAPI document"
    )
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=8080, ge=0, le=65535, description="TCP port to bind")
    request_timeout: float = Field(
        default=30.0, gt=0, description="Socket timeout for reading request bodies"
    )
    faker_seed: Optional[int] = Field(
        default=None, description="Seed for reproducible x-faker values"
    )
    faker_locale: str = Field(default="en_US", description="Faker locale")
