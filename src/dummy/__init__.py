"""dummy -- Serve canned responses from an OpenAPI 3.x document.

This package normalizes an OpenAPI document into a reference-free API model
whose responses all carry example payloads, and answers HTTP requests against
it.  Callers get realistic responses before a real implementation exists.

Typical workflow::

    dummy inspect openapi.yml          # list the mocked operations
    dummy server openapi.yml -p 8080   # serve them

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for the raw document, the API model, and config.
    parser: Loading, ``$ref`` resolution, and the build pass.
    matcher: Request-to-response selection.
    server: Threaded HTTP front end.
    generator: ``x-faker`` value generation backed by Faker.
    config: Server configuration precedence.
    exceptions: Exception hierarchy with exit-code and HTTP status mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting with Rich.
"""

__version__ = "0.1.0"
