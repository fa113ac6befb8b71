"""Tests for dummy.generator."""

from __future__ import annotations

import datetime
import decimal
import json
import uuid

import pytest

from dummy.generator import ValueGenerator, _to_json_value, provider_name
from dummy.output import OutputFormat, OutputManager, set_output


class TestProviderName:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("first_name", "first_name"),
            ("firstName", "first_name"),
            ("FirstName", "first_name"),
            ("person.firstName", "first_name"),
            ("uuid", "uuid4"),
            ("UUID", "uuid4"),
            ("guid", "uuid4"),
            ("internet.userName", "user_name"),
            ("phone", "phone_number"),
            ("dateTime", "iso8601"),
            ("email", "email"),
            ("  email ", "email"),
        ],
    )
    def test_normalization(self, name: str, expected: str) -> None:
        assert provider_name(name) == expected


class TestValueGenerator:
    def test_uuid_is_string(self) -> None:
        value = ValueGenerator().by_name("uuid")
        assert isinstance(value, str)
        assert uuid.UUID(value).version == 4

    def test_seed_is_reproducible(self) -> None:
        first = [ValueGenerator(seed=42).by_name(n) for n in ("firstName", "email", "uuid")]
        second = [ValueGenerator(seed=42).by_name(n) for n in ("firstName", "email", "uuid")]
        assert first == second

    def test_locale(self) -> None:
        value = ValueGenerator(locale="de_DE", seed=1).by_name("city")
        assert isinstance(value, str)
        assert value

    def test_values_are_json_serializable(self) -> None:
        generator = ValueGenerator(seed=3)
        for name in ("date_of_birth", "date_time", "pydecimal", "uuid"):
            json.dumps(generator.by_name(name))

    def test_unknown_provider_warns(self, capsys) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        assert ValueGenerator().by_name("definitelyNotAProvider") == ""
        assert "definitelyNotAProvider" in capsys.readouterr().err


class TestToJsonValue:
    def test_conversions(self) -> None:
        value = {
            "id": uuid.UUID("380ed0b7-eb21-4ad4-acd0-efa90cf69c6a"),
            "born": datetime.date(1973, 3, 26),
            "price": decimal.Decimal("9.5"),
            "raw": b"abc",
            "pair": (1, 2),
        }
        assert _to_json_value(value) == {
            "id": "380ed0b7-eb21-4ad4-acd0-efa90cf69c6a",
            "born": "1973-03-26",
            "price": 9.5,
            "raw": "abc",
            "pair": [1, 2],
        }
