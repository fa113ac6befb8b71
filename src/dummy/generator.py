"""Synthetic example values for schemas tagged with ``x-faker``.

A schema such as::

    id:
      type: string
      x-faker: uuid

is normalized into a :class:`~dummy.models.FakerSchema` whose example is
produced once, at build time, by :meth:`ValueGenerator.by_name`.  Names are
Faker provider methods; ``firstName``, ``FirstName``, ``first_name`` and
``person.firstName`` all select :meth:`faker.Faker.first_name`.
"""

from __future__ import annotations

import datetime
import decimal
import re
import uuid
from typing import Any, Optional

from faker import Faker

from dummy.output import warning

_ALIASES = {
    "uuid": "uuid4",
    "guid": "uuid4",
    "firstname": "first_name",
    "lastname": "last_name",
    "username": "user_name",
    "phone": "phone_number",
    "datetime": "iso8601",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ValueGenerator:
    """Resolve ``x-faker`` directive names to generated values.

    Args:
        locale: Faker locale, e.g. ``"en_US"`` or ``"de_DE"``.
        seed: Optional seed for reproducible output across runs.
    """

    def __init__(self, locale: str = "en_US", seed: Optional[int] = None) -> None:
        self._faker = Faker(locale)
        if seed is not None:
            self._faker.seed_instance(seed)

    def by_name(self, name: str) -> Any:
        """Return a value from the provider called *name*.

        Unknown providers, and providers that cannot be called without
        arguments, yield ``""`` and a warning.
        """
        method = provider_name(name)
        try:
            provider = getattr(self._faker, method)
            value = provider()
        except (AttributeError, TypeError):
            warning(f"Unknown x-faker provider {name!r}; using an empty string")
            return ""
        return _to_json_value(value)


def provider_name(name: str) -> str:
    """Normalize a directive name to a Faker method name.

    >>> provider_name("person.firstName")
    'first_name'
    """
    leaf = name.strip().rsplit(".", 1)[-1]
    snake = _CAMEL_BOUNDARY.sub("_", leaf).lower()
    return _ALIASES.get(snake.replace("_", ""), _ALIASES.get(snake, snake))


def _to_json_value(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, decimal.Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (tuple, set)):
        return [_to_json_value(v) for v in value]
    if isinstance(value, list):
        return [_to_json_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _to_json_value(v) for k, v in value.items()}
    return value
