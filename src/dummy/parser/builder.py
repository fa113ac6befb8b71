"""Build the normalized :class:`~dummy.models.API` from a raw OpenAPI document.

This is the second half of the load pipeline.  :func:`build_api` visits every
path and each of the five mockable methods declared on it, and produces one
:class:`~dummy.models.Operation` per pair:

* ``body`` -- the field requirement map of the JSON request body: every name
  listed in ``required`` is marked required, then each property contributes
  its declared type.
* ``responses`` -- one :class:`~dummy.models.Response` per status code, in
  declaration order, with the example, named examples, and resolved schema of
  its JSON content.

Any failure aborts the whole build; a partially built API is never returned.
"""

from __future__ import annotations

from typing import Any, Optional

from dummy.exceptions import StatusCodeParseError
from dummy.generator import ValueGenerator
from dummy.models import (
    API,
    ArraySchema,
    FieldType,
    HTTPMethod,
    MediaTypeObject,
    OpenAPIDocument,
    Operation,
    RawOperation,
    RawSchema,
    Response,
    Schema,
)
from dummy.output import debug
from dummy.parser.resolver import resolve_schema

JSON_MEDIA_TYPE = "application/json"


def build_api(document: OpenAPIDocument, generator: ValueGenerator) -> API:
    """Normalize every operation in *document*.

    Args:
        document: The validated raw document.
        generator: Producer of ``x-faker`` values.

    Returns:
        The immutable API model.

    Raises:
        SchemaBuildError: Any resolution or status-code error, unchanged.

    Example::

        api = build_api(load_document("openapi.yml"), ValueGenerator())
        for op in api.operations:
            print(op.method.value, op.path)
    """
    operations: list[Operation] = []

    for path, path_item in document.paths.items():
        for method in HTTPMethod:
            raw = getattr(path_item, method.value.lower())
            if raw is None:
                continue

            operation = _build_operation(remove_trailing_slash(path), method, raw, document, generator)
            debug(
                f"Built {method.value} {operation.path} "
                f"({len(operation.responses)} responses, {len(operation.body)} body fields)"
            )
            operations.append(operation)

    return API(operations=operations)


def _build_operation(
    path: str,
    method: HTTPMethod,
    raw: RawOperation,
    document: OpenAPIDocument,
    generator: ValueGenerator,
) -> Operation:
    body: dict[str, FieldType] = {}
    if raw.request_body is not None:
        _, content = _json_content(raw.request_body.content)
        if content is not None and content.schema_ is not None:
            body = build_field_types(content.schema_, document)

    responses: list[Response] = []
    for code, raw_response in raw.responses.items():
        status_code = parse_status_code(code)

        media_type, content = _json_content(raw_response.content)
        if content is None:
            responses.append(Response(status_code=status_code))
            continue

        # JSON content without a schema resolves as an untyped node and fails
        raw_schema = content.schema_ if content.schema_ is not None else RawSchema()
        schema = resolve_schema(raw_schema, document, generator)
        responses.append(
            Response(
                status_code=status_code,
                media_type=media_type,
                schema=schema,
                example=example_to_response(content.example, schema),
                examples=_named_examples(content, document, schema),
            )
        )

    return Operation(method=method, path=path, body=body, responses=responses)


def build_field_types(schema: RawSchema, document: OpenAPIDocument) -> dict[str, FieldType]:
    """Return the field requirement map of a request body schema.

    A top-level ``$ref`` is followed first.  Names in ``required`` without a
    matching property are kept as required fields with an empty type.
    """
    if schema.ref:
        schema = document.lookup_by_reference(schema.ref)

    fields = {name: FieldType(required=True) for name in schema.required}
    for name, prop in schema.properties.items():
        declared = prop.type
        if not declared and prop.ref:
            declared = document.lookup_by_reference(prop.ref).type
        fields[name] = FieldType(
            required=fields[name].required if name in fields else False,
            type=declared,
        )
    return fields


def _named_examples(
    content: MediaTypeObject,
    document: OpenAPIDocument,
    schema: Optional[Schema],
) -> dict[str, Any]:
    examples: dict[str, Any] = {}
    if not content.examples:
        return examples

    for name, named in content.examples.items():
        if named.ref:
            named = document.lookup_example(named.ref)
        examples[name] = example_to_response(named.value, schema)

    examples[""] = examples[min(content.examples)]
    return examples


def example_to_response(example: Any, schema: Optional[Schema] = None) -> Any:
    """Normalize a response example: mappings and lists pass through.

    An absent example becomes ``[]`` for array schemas and ``{}`` otherwise.
    Scalar examples (e.g. a bare string) are kept as declared.
    """
    if example is None:
        return [] if isinstance(schema, ArraySchema) else {}
    return example


def parse_status_code(code: str) -> int:
    """Parse a response key such as ``"201"``.

    Raises:
        StatusCodeParseError: For ``default``, ``2XX`` and other non-integers.
    """
    try:
        return int(code)
    except ValueError:
        raise StatusCodeParseError(code) from None


def is_json_media_type(media_type: str) -> bool:
    """Return True for ``application/json``, its ``+json`` variants, and parameterized forms."""
    essence = media_type.split(";", 1)[0].strip().lower()
    return essence == JSON_MEDIA_TYPE or (
        essence.startswith("application/") and essence.endswith("+json")
    )


def _json_content(
    content: dict[str, MediaTypeObject],
) -> tuple[str, Optional[MediaTypeObject]]:
    if JSON_MEDIA_TYPE in content:
        return JSON_MEDIA_TYPE, content[JSON_MEDIA_TYPE]
    for media_type, media in content.items():
        if is_json_media_type(media_type):
            return media_type, media
    return "", None


def remove_trailing_slash(path: str) -> str:
    """Drop exactly one trailing ``/``; ``"/"`` becomes ``""``."""
    if path.endswith("/"):
        return path[:-1]
    return path
