"""Resolve raw OpenAPI schema nodes into the normalized :data:`~dummy.models.Schema` union.

:func:`resolve_schema` walks a :class:`~dummy.models.RawSchema`, following
``$ref`` pointers through :meth:`~dummy.models.OpenAPIDocument.lookup_by_reference`,
and returns a reference-free tagged variant that always carries a concrete
example value.  Absent or unusable scalar examples fall back to the zero value
of their type; container examples of the wrong shape are rejected.

References are expanded eagerly.  The names currently being expanded are
tracked per branch, so a schema that (directly or indirectly) contains itself
raises :class:`~dummy.exceptions.CyclicReferenceError` instead of recursing
forever.  Sibling branches that reuse the same reference are fine.
"""

from __future__ import annotations

from typing import Any, Callable

from dummy.exceptions import (
    ArrayExampleTypeError,
    CyclicReferenceError,
    EmptyItemsError,
    ObjectExampleTypeError,
    UnknownSchemaTypeError,
)
from dummy.generator import ValueGenerator
from dummy.models import (
    ArraySchema,
    BooleanSchema,
    FakerSchema,
    FloatSchema,
    IntSchema,
    ObjectSchema,
    OpenAPIDocument,
    RawSchema,
    Schema,
    StringSchema,
)


def resolve_schema(
    node: RawSchema,
    document: OpenAPIDocument,
    generator: ValueGenerator,
) -> Schema:
    """Convert *node* into a normalized schema.

    Args:
        node: The raw schema, possibly a ``$ref``.
        document: Source of ``$ref`` targets.
        generator: Producer of ``x-faker`` values.

    Returns:
        One of the :data:`~dummy.models.Schema` variants.

    Raises:
        ReferenceResolutionError: If a ``$ref`` cannot be resolved.
        CyclicReferenceError: If a ``$ref`` chain loops back on itself.
        EmptyItemsError: If an array declares no ``items``.
        ArrayExampleTypeError: If an array's example is not a list.
        ObjectExampleTypeError: If an object's example is not a string-keyed mapping.
        UnknownSchemaTypeError: If ``type`` is not a JSON Schema primitive.

    Example::

        doc = load_document("openapi.yml")
        schema = resolve_schema(RawSchema(ref="#/components/schemas/User"), doc, ValueGenerator())
        assert isinstance(schema, ObjectSchema)
    """
    return _resolve(node, document, generator, ())


def _resolve(
    node: RawSchema,
    document: OpenAPIDocument,
    generator: ValueGenerator,
    expanding: tuple[str, ...],
) -> Schema:
    while node.ref:
        if node.ref in expanding:
            raise CyclicReferenceError(node.ref, list(expanding))
        expanding = (*expanding, node.ref)
        node = document.lookup_by_reference(node.ref)

    if node.faker:
        return FakerSchema(example=generator.by_name(node.faker))

    builder = _BUILDERS.get(node.type)
    if builder is None:
        raise UnknownSchemaTypeError(node.type)
    return builder(node, document, generator, expanding)


def _boolean(node: RawSchema, *_: Any) -> Schema:
    return BooleanSchema(example=node.example if isinstance(node.example, bool) else False)


def _integer(node: RawSchema, *_: Any) -> Schema:
    return IntSchema(example=_coerce_int(node.example))


def _number(node: RawSchema, *_: Any) -> Schema:
    return FloatSchema(example=_coerce_float(node.example))


def _string(node: RawSchema, *_: Any) -> Schema:
    return StringSchema(example=node.example if isinstance(node.example, str) else "")


def _array(
    node: RawSchema,
    document: OpenAPIDocument,
    generator: ValueGenerator,
    expanding: tuple[str, ...],
) -> Schema:
    if node.items is None:
        raise EmptyItemsError()

    items = _resolve(node.items, document, generator, expanding)
    return ArraySchema(items=items, example=parse_array_example(node.example))


def _object(
    node: RawSchema,
    document: OpenAPIDocument,
    generator: ValueGenerator,
    expanding: tuple[str, ...],
) -> Schema:
    properties = {
        name: _resolve(prop, document, generator, expanding)
        for name, prop in node.properties.items()
    }
    return ObjectSchema(properties=properties, example=parse_object_example(node.example))


_Builder = Callable[[RawSchema, OpenAPIDocument, ValueGenerator, tuple[str, ...]], Schema]

_BUILDERS: dict[str, _Builder] = {
    "boolean": _boolean,
    "integer": _integer,
    "number": _number,
    "string": _string,
    "array": _array,
    "object": _object,
}


def parse_array_example(data: Any) -> list[Any]:
    """Return a copy of a list example; ``None`` becomes ``[]``.

    Raises:
        ArrayExampleTypeError: For any other shape.
    """
    if data is None:
        return []
    if isinstance(data, list):
        return list(data)
    raise ArrayExampleTypeError(data)


def parse_object_example(data: Any) -> dict[str, Any]:
    """Return a copy of a mapping example; ``None`` becomes ``{}``.

    Raises:
        ObjectExampleTypeError: For any other shape, or a mapping with
            non-string keys (YAML reads ``200: ok`` as an integer key).
    """
    if data is None:
        return {}
    if isinstance(data, dict) and all(isinstance(key, str) for key in data):
        return dict(data)
    raise ObjectExampleTypeError(data)


def _coerce_int(value: Any) -> int:
    # bool is an int subclass; true/false is never an integer example
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _coerce_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return 0.0
