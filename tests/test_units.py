import pytest

from power_tui.units import Units, format_duration, format_energy, format_temperature


def test_parse_is_case_insensitive() -> None:
    assert Units.parse("human") is Units.HUMAN
    assert Units.parse("SI") is Units.SI
    assert Units.parse(Units.SI) is Units.SI


def test_parse_rejects_unknown_units() -> None:
    with pytest.raises(ValueError, match="human, si"):
        Units.parse("imperial")


def test_temperature_and_energy_formatting() -> None:
    assert format_temperature(21.5, Units.HUMAN) == "21.50 °C"
    assert format_temperature(0.0, Units.SI) == "273.15 K"
    assert format_temperature(None, Units.HUMAN) == "N/A"
    assert format_energy(42.0, Units.HUMAN) == "42.00 Wh"
    assert format_energy(1.5, Units.SI) == "5400.00 J"


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (None, "N/A"),
        (0, "0s"),
        (59.9, "59s"),
        (3600, "1h"),
        (5025, "1h 23m 45s"),
        (90_061, "1d 1h 1m 1s"),
    ],
)
def test_format_duration(seconds, expected: str) -> None:
    assert format_duration(seconds) == expected
