# [TESTER] v1

from __future__ import annotations

import pytest

from ammcore.core.units import format_bps, format_units, parse_units
from ammcore.errors import InvalidAmount


def test_parse_units_scales_to_base_units() -> None:
    assert parse_units("1.5", 6) == 1_500_000
    assert parse_units("1,000", 0) == 1_000
    assert parse_units(" 0.000001 ", 6) == 1
    assert parse_units("2", 18) == 2 * 10**18
    assert parse_units("1e3", 2) == 100_000


@pytest.mark.parametrize("text", ["", "abc", "nan", "inf", "-1", "0.1234567"])
def test_parse_units_rejects_bad_input(text: str) -> None:
    with pytest.raises(InvalidAmount):
        parse_units(text, 6)


def test_parse_units_rejects_non_strings() -> None:
    with pytest.raises(InvalidAmount):
        parse_units(1.5, 6)  # type: ignore[arg-type]


def test_parse_units_rejects_bad_decimals() -> None:
    with pytest.raises(ValueError, match="decimals"):
        parse_units("1", 99)


def test_format_units_truncates() -> None:
    assert format_units(1_234_567_891, 6, 2) == "1,234.56"
    assert format_units(10**18) == "1.000000"
    assert format_units(999, 3, 0) == "0"
    assert format_units(0, 18, 2) == "0.00"


def test_format_bps() -> None:
    assert format_bps(30) == "0.30%"
    assert format_bps(10_000, 0) == "100%"
    assert format_bps(1, 3) == "0.010%"
