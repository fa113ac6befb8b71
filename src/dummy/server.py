"""HTTP front end that answers requests from a built :class:`~dummy.models.API`.

:class:`MockServer` is a :class:`~http.server.ThreadingHTTPServer`: each
connection is handled on its own thread, and every thread shares the same
frozen API model through :func:`~dummy.matcher.find_response`.

For every request the handler:

* strips one trailing ``/`` from the path, the same way operation paths were
  normalized at build time, and ignores the query string;
* takes the desired media type from the first ``Accept`` entry
  (``application/json`` when absent or ``*/*``);
* reads exactly ``Content-Length`` bytes of body for write methods, and
  answers 400 when that header is not a non-negative integer;
* renders the matched response with :func:`render_body`, or answers
  :class:`~dummy.exceptions.MatchError` failures with their ``http_status``
  and a JSON ``{"error": ...}`` payload.

The ``X-Example`` request header selects a named example.
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Optional
from urllib.parse import urlsplit

from dummy.exceptions import MatchError, OperationNotFoundError, RequestBodyDecodeError
from dummy.matcher import FindResponseParams, find_response
from dummy.models import API, BODY_METHODS, Response, ServerConfig
from dummy.output import debug, info, warning
from dummy.parser.builder import JSON_MEDIA_TYPE, remove_trailing_slash

EXAMPLE_HEADER = "X-Example"


def render_body(response: Response, example_name: Optional[str] = None) -> Any:
    """Pick the payload to send for *response*.

    In order: the named example *example_name*; the response's ``example``
    unless it is absent or an empty mapping or list (falsy scalars such as
    ``0`` and ``false`` are sent as declared); the default named example (``examples[""]``); the
    example synthesized from the schema.  Returns ``None`` when the response
    declares no content at all.
    """
    if example_name is not None and example_name in response.examples:
        return response.examples[example_name]
    if response.example is not None and response.example not in ({}, []):
        return response.example
    if "" in response.examples:
        return response.examples[""]
    if response.schema_ is not None:
        return response.schema_.example_value()
    if response.media_type:
        return response.example
    return None


def desired_media_type(accept: Optional[str]) -> str:
    """Return the first media range of an ``Accept`` header, without parameters."""
    if not accept:
        return JSON_MEDIA_TYPE
    first = accept.split(",", 1)[0].split(";", 1)[0].strip()
    if not first or first == "*/*":
        return JSON_MEDIA_TYPE
    return first


class MockRequestHandler(BaseHTTPRequestHandler):
    """Serves one connection; the API model lives on :attr:`server`."""

    server: MockServer
    server_version = "dummy"

    def setup(self) -> None:
        self.timeout = self.server.request_timeout
        super().setup()

    def do_GET(self) -> None:
        self._handle()

    def do_POST(self) -> None:
        self._handle()

    def do_PUT(self) -> None:
        self._handle()

    def do_PATCH(self) -> None:
        self._handle()

    def do_DELETE(self) -> None:
        self._handle()

    def _handle(self) -> None:
        path = remove_trailing_slash(urlsplit(self.path).path)

        try:
            params = FindResponseParams(
                path=path,
                method=self.command,
                body=self._read_body() if self.command in BODY_METHODS else None,
                media_type=desired_media_type(self.headers.get("Accept")),
            )
            response = find_response(self.server.api, params)
        except MatchError as exc:
            if isinstance(exc, OperationNotFoundError):
                warning(str(exc))
            self._send(exc.http_status, JSON_MEDIA_TYPE, {"error": str(exc)})
            return

        payload = render_body(response, self.headers.get(EXAMPLE_HEADER))
        self._send(response.status_code, response.media_type or JSON_MEDIA_TYPE, payload)

    def _read_body(self) -> bytes:
        declared = self.headers.get("Content-Length") or "0"
        try:
            length = int(declared)
        except ValueError:
            length = -1
        if length < 0:
            # the body was not consumed, so the connection cannot be reused
            self.close_connection = True
            raise RequestBodyDecodeError(f"invalid Content-Length: {declared!r}")
        return self.rfile.read(length) if length > 0 else b""

    def _send(self, status: int, media_type: str, payload: Any) -> None:
        body = b"" if payload is None else json.dumps(payload, default=str).encode("utf-8")
        self.send_response(status)
        if body:
            self.send_header("Content-Type", media_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body:
            self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        debug(f"{self.address_string()} - {format % args}")


class MockServer(ThreadingHTTPServer):
    """Threaded HTTP server bound to one immutable API model.

    Args:
        address: ``(host, port)`` to bind; port ``0`` picks a free port.
        api: The model every request is matched against.
        request_timeout: Socket timeout, in seconds, for each connection.
    """

    daemon_threads = True

    def __init__(self, address: tuple[str, int], api: API, request_timeout: float = 30.0) -> None:
        self.api = api
        self.request_timeout = request_timeout
        super().__init__(address, MockRequestHandler)


def serve(api: API, config: ServerConfig) -> None:
    """Run the mock server until interrupted."""
    server = MockServer((config.host, config.port), api, config.request_timeout)
    host, port = server.server_address[:2]
    info(f"Serving {len(api.operations)} operations on http://{host}:{port}")
    try:
        server.serve_forever()
    finally:
        server.server_close()
