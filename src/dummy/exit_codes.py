"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~dummy.exceptions.DummyError` subclass.
Shell wrappers and CI scripts can inspect the exit code to tell a broken
document apart from a request that simply did not match.

Example::

    $ dummy server broken.yml
    $ echo $?
    8   # EXIT_SCHEMA_BUILD_ERROR -- the document could not be normalized
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or a request body that fails the operation's requirements."""

EXIT_NOT_FOUND = 4
"""No operation matches the requested method and path."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI document could not be read, deserialized, or validated."""

EXIT_SCHEMA_BUILD_ERROR = 8
"""The OpenAPI document was read but could not be normalized into an API model."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C."""
