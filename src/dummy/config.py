"""Configuration resolution for the mock server.

Settings end up in a :class:`~dummy.models.ServerConfig`.  Each field is
taken from the first source that defines it:

1. CLI flags (passed to :func:`resolve_config` as keyword arguments)
2. Environment variables (``DUMMY_SPEC``, ``DUMMY_HOST``, ``DUMMY_PORT``,
   ``DUMMY_REQUEST_TIMEOUT``, ``DUMMY_FAKER_SEED``, ``DUMMY_FAKER_LOCALE``)
3. Project config (``./dummy.json``)
4. Defaults declared on the model
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from dummy.exceptions import ConfigError
from dummy.models import ServerConfig

_PROJECT_CONFIG_FILENAME = "dummy.json"
_ENV_PREFIX = "DUMMY_"


def load_project_config(directory: Optional[Path] = None) -> dict[str, Any]:
    """Load project-local configuration from ``dummy.json``.

    Args:
        directory: Where to look; defaults to the current working directory.

    Returns:
        The parsed JSON object, or an empty dict if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def load_env_config() -> dict[str, Any]:
    """Collect ``DUMMY_*`` environment variables for the fields of :class:`ServerConfig`."""
    values: dict[str, Any] = {}
    for field_name in ServerConfig.model_fields:
        value = os.environ.get(_ENV_PREFIX + field_name.upper())
        if value:
            values[field_name] = value
    return values


def resolve_config(**cli_values: Any) -> ServerConfig:
    """Resolve the effective server config.

    Keyword arguments are CLI flag values; ``None`` means "not given".

    Raises:
        ConfigError: If the merged values fail validation (e.g. a
            non-numeric ``DUMMY_PORT``).

    Example::

        config = resolve_config(spec="openapi.yml", port=None)
    """
    merged: dict[str, Any] = {}
    merged.update(load_project_config())
    merged.update(load_env_config())
    merged.update({key: value for key, value in cli_values.items() if value is not None})

    try:
        return ServerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
