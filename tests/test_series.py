import pytest

from power_tui.powerlib.sysfs import State
from power_tui.series import NOT_AVAILABLE, RESOLUTION, STEP, ScalarSeries, SeriesKind
from power_tui.units import Units


def test_push_tracks_latest_min_and_max() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    for value in (1.0, 2.0, 3.0):
        series.push(value)

    assert series.min == 1.0
    assert series.max == 3.0
    assert series.latest == 3.0
    assert len(series.points) == 3


def test_single_point_has_equal_min_and_max() -> None:
    series = ScalarSeries(SeriesKind.ENERGY_RATE)
    series.push(7.25)
    assert series.min == series.max == 7.25


def test_capacity_evicts_oldest_values_first() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    for value in range(1, 601):
        series.push(float(value))

    assert series.capacity == RESOLUTION
    assert len(series) == RESOLUTION
    assert [y for _, y in series.points] == [float(v) for v in range(89, 601)]
    assert series.min == 89.0
    assert series.max == 600.0


def test_length_never_exceeds_capacity() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE, capacity=8)
    for value in range(50):
        series.push(float(value % 7))
        assert len(series.points) <= 8
    assert series.values == tuple(float(v % 7) for v in range(42, 50))


def test_newest_point_sits_at_half_capacity_and_older_shift_left() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    series.push(10.0)
    assert series.points == ((RESOLUTION / 2, 10.0),)

    series.push(11.0)
    series.push(12.0)
    assert series.points == (
        (RESOLUTION / 2 - 2 * STEP, 10.0),
        (RESOLUTION / 2 - STEP, 11.0),
        (RESOLUTION / 2, 12.0),
    )


def test_full_window_spans_the_x_bounds() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    for value in range(RESOLUTION + 10):
        series.push(float(value))
    xs = [x for x, _ in series.points]
    low, high = series.x_bounds
    assert (low, high) == (0.0, RESOLUTION / 2)
    assert xs[-1] == high
    assert xs[0] == pytest.approx(high - STEP * (RESOLUTION - 1))
    assert all(low <= x <= high for x in xs)


def test_min_max_bound_every_retained_value() -> None:
    series = ScalarSeries(SeriesKind.TEMPERATURE, capacity=16)
    readings = [3.5, -2.0, 9.75, 0.0, 4.2, 4.2, 12.5, -7.1] * 5
    for value in readings:
        series.push(value)
        assert all(series.min <= y <= series.max for _, y in series.points)


def test_y_bounds_are_padded_and_strictly_ordered() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    series.push(12.3)
    assert series.y_bounds == (11.0, 14.0)

    flat = ScalarSeries(SeriesKind.VOLTAGE)
    flat.push(5.0)
    lower, upper = flat.y_bounds
    assert lower < upper


def test_y_lower_bound_is_minus_one_for_small_positive_values() -> None:
    series = ScalarSeries(SeriesKind.ENERGY_RATE)
    series.push(0.0)
    series.push(0.4)
    assert series.y_bounds == (-1.0, 2.0)


def test_empty_series_has_ordered_bounds() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    lower, upper = series.y_bounds
    assert (lower, upper) == (0.0, 1.0)
    assert series.y_labels() == (" 0", " 1")

    temperature = ScalarSeries(SeriesKind.TEMPERATURE)
    assert temperature.y_labels(Units.SI) == ("273", "274")


def test_y_bounds_stay_ordered_for_negative_values() -> None:
    series = ScalarSeries(SeriesKind.TEMPERATURE)
    series.push(-12.5)
    series.push(-4.0)
    lower, upper = series.y_bounds
    assert lower == -14.0
    assert upper == -3.0
    assert lower < upper


def test_disabled_series_reports_sentinels_but_keeps_history() -> None:
    series = ScalarSeries(SeriesKind.TEMPERATURE)
    series.push(30.0)
    series.set_enabled(False)

    assert series.enabled is False
    assert series.current_value_display() == NOT_AVAILABLE
    assert series.y_bounds == (0.0, 0.0)
    assert series.y_labels() == (" 0", " 0")
    assert series.values == (30.0,)

    series.set_enabled(True)
    assert series.current_value_display() == "30.00 °C"


def test_y_labels_have_no_decimals() -> None:
    series = ScalarSeries(SeriesKind.VOLTAGE)
    series.push(12.3)
    assert series.y_labels() == ("11", "14")


def test_temperature_display_follows_units() -> None:
    series = ScalarSeries(SeriesKind.TEMPERATURE)
    series.push(25.0)

    assert series.current_value_display(Units.HUMAN) == "25.00 °C"
    assert series.current_value_display(Units.SI) == "298.15 K"
    assert series.unit_label(Units.SI) == "K"
    assert series.y_labels(Units.SI) == ("297", "299")
    # Storage is unaffected by the display units.
    assert series.latest == 25.0


def test_energy_rate_title_follows_state() -> None:
    series = ScalarSeries(SeriesKind.ENERGY_RATE)
    assert series.title == "Consumption"
    series.state = State.CHARGING
    assert series.title == "Charging with"
    series.state = State.DISCHARGING
    assert series.title == "Discharging with"
    assert ScalarSeries(SeriesKind.VOLTAGE).title == "Voltage"


def test_invalid_capacity_is_rejected() -> None:
    with pytest.raises(ValueError):
        ScalarSeries(SeriesKind.VOLTAGE, capacity=0)
