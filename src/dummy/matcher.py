"""Select the canned response for an incoming request.

:func:`find_response` is the runtime half of dummy.  It is a stateless query
against an immutable :class:`~dummy.models.API`, safe to call from many
request threads at once:

1. Find the first operation whose method is equal and whose path template
   matches (:func:`path_matches`).
2. For POST, PUT and PATCH, decode the body as a JSON object and check that
   every required field is present.  Unknown fields are accepted.
3. Return the first response whose media type equals the requested one, or
   else the operation's first declared response.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import IO, Any, Optional, Union

from dummy.exceptions import (
    MissingRequiredFieldError,
    OperationNotFoundError,
    RequestBodyDecodeError,
)
from dummy.models import API, BODY_METHODS, Operation, Response


@dataclass(frozen=True)
class FindResponseParams:
    """An incoming request, reduced to what matching needs.

    ``body`` is either the raw bytes or a binary stream; it is only read for
    POST, PUT and PATCH.
    """

    path: str
    method: str
    body: Union[bytes, IO[bytes], None] = None
    media_type: str = "application/json"


def find_response(api: API, params: FindResponseParams) -> Response:
    """Return the response *api* declares for the request described by *params*.

    Raises:
        OperationNotFoundError: If no operation matches method and path.
        RequestBodyDecodeError: If a write request's body is not a JSON object.
        MissingRequiredFieldError: If a required body field is absent.

    Example::

        response = find_response(api, FindResponseParams(path="/users/42", method="GET"))
        assert response.status_code == 200
    """
    operation = find_operation(api, params.method, params.path)
    if operation is None:
        raise OperationNotFoundError(params.method, params.path)

    if params.method in BODY_METHODS:
        body = decode_body(params.body)
        for name, field in operation.body.items():
            if field.required and name not in body:
                raise MissingRequiredFieldError(name)

    for response in operation.responses:
        if response.media_type == params.media_type:
            return response

    return operation.responses[0]


def find_operation(api: API, method: str, path: str) -> Optional[Operation]:
    """Return the first operation with exactly *method* whose template matches *path*."""
    for operation in api.operations:
        if operation.method.value != method:
            continue
        if path_matches(path, operation.path):
            return operation
    return None


def path_matches(path: str, template: str) -> bool:
    """Return True if *path* fits the path *template*.

    Both are split on ``/``; they match when they have the same number of
    segments and every template segment is either a ``{placeholder}`` or
    identical to the path segment.

    >>> path_matches("/users/42", "/users/{userId}")
    True
    >>> path_matches("/users/42/orders", "/users/{userId}")
    False
    """
    path_segments = path.split("/")
    template_segments = template.split("/")

    if len(path_segments) != len(template_segments):
        return False

    for segment, expected in zip(path_segments, template_segments):
        if expected.startswith("{") and expected.endswith("}"):
            continue
        if segment != expected:
            return False

    return True


def decode_body(body: Union[bytes, IO[bytes], None]) -> dict[str, Any]:
    """Decode a request body as a JSON object.

    Raises:
        RequestBodyDecodeError: On empty input, invalid JSON, or a JSON value
            that is not an object.
    """
    raw = body.read() if hasattr(body, "read") else body
    if not raw:
        raise RequestBodyDecodeError("request body is empty")

    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestBodyDecodeError(f"invalid JSON body: {exc}") from exc

    if not isinstance(decoded, dict):
        raise RequestBodyDecodeError(
            f"request body must be a JSON object, got {type(decoded).__name__}"
        )
    return decoded
