"""Typer application and CLI entry point for dummy.

Commands:

* ``dummy server SPEC`` -- build the API model and serve it over HTTP.
* ``dummy inspect SPEC`` -- list the operations the document produces.
* ``dummy match SPEC METHOD PATH`` -- run one request through the matcher
  and print the response that would be served.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  :class:`~dummy.exceptions.DummyError` failures exit
with their ``exit_code``; anything else is reported as an unexpected error.
"""

from __future__ import annotations

import signal
import sys
import traceback
from typing import Any, Optional

import typer

from dummy import __version__
from dummy.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="dummy",
    help="Run a mock server from an OpenAPI 3.x document.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"dummy {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every built operation and served request."
    ),
) -> None:
    """Install the global :class:`~dummy.output.OutputManager` from CLI flags."""
    from dummy.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))


def _load(**cli_values: Any):  # noqa: ANN202
    """Resolve config from CLI values, then load and build the API model it points at."""
    from dummy.config import resolve_config
    from dummy.exceptions import ConfigError
    from dummy.generator import ValueGenerator
    from dummy.output import debug
    from dummy.parser import load_api

    config = resolve_config(**cli_values)
    if config.spec is None:
        raise ConfigError("No OpenAPI document given. Pass SPEC or set DUMMY_SPEC.")

    debug(f"Loading spec from {config.spec}")
    generator = ValueGenerator(locale=config.faker_locale, seed=config.faker_seed)
    return load_api(config.spec, generator), config


@app.command("server")
def server_command(
    spec: Optional[str] = typer.Argument(
        None, help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="TCP port to bind."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for a request body."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for x-faker values."),
    locale: Optional[str] = typer.Option(None, "--locale", help="Faker locale."),
) -> None:
    """Serve canned responses for every operation in SPEC.

    Example::

        dummy server openapi.yml --port 8080
    """
    from dummy.server import serve

    api, config = _load(
        spec=spec,
        host=host,
        port=port,
        request_timeout=timeout,
        faker_seed=seed,
        faker_locale=locale,
    )
    serve(api, config)


@app.command("inspect")
def inspect_command(
    spec: Optional[str] = typer.Argument(
        None, help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
) -> None:
    """List the operations SPEC produces, with status codes and required body fields."""
    from dummy.output import print_table

    api, _ = _load(spec=spec)

    rows: list[list[str]] = []
    for op in api.operations:
        rows.append([
            op.method.value,
            op.path or "/",
            ", ".join(str(r.status_code) for r in op.responses) or "-",
            ", ".join(sorted(name for name, f in op.body.items() if f.required)) or "-",
        ])

    print_table(
        ["Method", "Path", "Responses", "Required body"],
        rows,
        title=f"Operations ({len(rows)})",
    )


@app.command("match")
def match_command(
    spec: str = typer.Argument(..., help="OpenAPI document: file path, URL, or '-'."),
    method: str = typer.Argument(..., help="HTTP method, e.g. GET."),
    path: str = typer.Argument(..., help="Request path, e.g. /users/42."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="JSON request body."),
    media_type: str = typer.Option(
        "application/json", "--media-type", "-m", help="Desired response media type."
    ),
    example: Optional[str] = typer.Option(None, "--example", help="Named example to render."),
) -> None:
    """Show the response dummy would serve for one request.

    Example::

        dummy match openapi.yml POST /users -d '{"id": "1"}'
    """
    from dummy.matcher import FindResponseParams, find_response
    from dummy.output import format_response, info
    from dummy.parser.builder import remove_trailing_slash
    from dummy.server import render_body

    api, _ = _load(spec=spec)
    response = find_response(
        api,
        FindResponseParams(
            path=remove_trailing_slash(path),
            method=method.upper(),
            body=body.encode("utf-8") if body is not None else None,
            media_type=media_type,
        ),
    )

    info(f"{response.status_code} {response.media_type or '-'}")
    payload = render_body(response, example)
    if payload is not None:
        format_response(payload, response.media_type or "application/json")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``dummy`` console script.

    Unhandled :class:`~dummy.exceptions.DummyError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions print their
    traceback under ``--verbose`` and exit with a generic failure.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from dummy.exceptions import ConfigError, DummyError
        from dummy.output import debug, error, get_output, suggest

        if isinstance(exc, DummyError):
            error(str(exc))
            if isinstance(exc, ConfigError):
                suggest("Try: dummy server openapi.yml --port 8080")
            sys.exit(exc.exit_code)

        error(f"Unexpected error: {exc}")
        if get_output().is_verbose:
            debug(traceback.format_exc())
        sys.exit(EXIT_GENERIC_FAILURE)
