"""
Test Module for Date Range Resolution.

Validates:
- Preset windows end on the anchor and span exactly N days
- Custom bounds are normalized and incomplete ones fall back to the default
- Anchor selection for TODAY and LATEST_DATA modes
- Malformed dates and unknown presets raise InvalidRange
"""

from datetime import date, datetime

import pytest

from response_metrics.core.exceptions import InvalidRange
from response_metrics.models import DateRange, RangeAnchor
from response_metrics.services.range_resolver import (
    DEFAULT_PRESETS,
    parse_iso_date,
    preset_range,
    resolve_anchor,
    resolve_range,
)
from response_metrics.tests.conftest import make_row


ANCHOR = date(2024, 1, 30)


class TestParseIsoDate:
    """Tests for parse_iso_date."""

    def test_parses_iso_string(self):
        assert parse_iso_date("2024-01-31") == date(2024, 1, 31)

    def test_strips_whitespace(self):
        assert parse_iso_date(" 2024-01-31 ") == date(2024, 1, 31)

    def test_date_passthrough(self):
        assert parse_iso_date(date(2024, 2, 29)) == date(2024, 2, 29)

    def test_datetime_truncated_to_day(self):
        result = parse_iso_date(datetime(2024, 1, 5, 23, 59))
        assert result == date(2024, 1, 5)
        assert type(result) is date

    @pytest.mark.parametrize("value", [
        "2024-1-5", "2024-02-30", "not-a-date", "", "2024-01-05T10:00", 20240105, None,
        "2024-W01-1", "20240105  ", "2024-001-1",
    ])
    def test_malformed_raises_invalid_range(self, value):
        with pytest.raises(InvalidRange):
            parse_iso_date(value)

    def test_invalid_range_is_value_error(self):
        with pytest.raises(ValueError):
            parse_iso_date("2024-13-01")


class TestResolveAnchor:
    """Tests for anchor selection."""

    def test_today_mode_ignores_rows(self):
        rows = [make_row("2024-01-02", "a", 1)]
        assert resolve_anchor(rows, RangeAnchor.TODAY, ANCHOR) == ANCHOR

    def test_latest_data_uses_max_row_date(self):
        rows = [
            make_row("2024-01-02", "a", 1),
            make_row("2024-01-07", "b", 1),
            make_row("2024-01-04", "a", 1),
        ]
        assert resolve_anchor(rows, RangeAnchor.LATEST_DATA, ANCHOR) == date(2024, 1, 7)

    def test_latest_data_empty_rows_is_none(self):
        assert resolve_anchor([], RangeAnchor.LATEST_DATA, ANCHOR) is None

    def test_today_mode_with_empty_rows(self):
        assert resolve_anchor([], RangeAnchor.TODAY, ANCHOR) == ANCHOR


class TestPresetRanges:
    """Preset windows: end = anchor, start = anchor - (N - 1)."""

    @pytest.mark.parametrize("days", list(DEFAULT_PRESETS))
    def test_preset_spans_n_days(self, days):
        result = resolve_range(ANCHOR, preset=days)
        assert result.end == ANCHOR
        assert result.days == days

    def test_seven_day_preset(self):
        assert resolve_range(ANCHOR, preset=7) == DateRange(start=date(2024, 1, 24), end=ANCHOR)

    def test_default_preset_when_nothing_given(self):
        result = resolve_range(ANCHOR)
        assert result == DateRange(start=date(2024, 1, 1), end=ANCHOR)

    def test_custom_default_days(self):
        result = resolve_range(ANCHOR, default_days=14)
        assert result.days == 14

    def test_unknown_preset_raises(self):
        with pytest.raises(InvalidRange):
            resolve_range(ANCHOR, preset=5)

    def test_unknown_preset_raises_without_anchor(self):
        with pytest.raises(InvalidRange):
            resolve_range(None, preset=90)

    def test_preset_range_rejects_zero_days(self):
        with pytest.raises(InvalidRange):
            preset_range(ANCHOR, 0)

    def test_no_anchor_returns_none(self):
        assert resolve_range(None, preset=7) is None


class TestCustomRanges:
    """Custom bounds take priority over presets."""

    def test_custom_bounds(self):
        result = resolve_range(ANCHOR, start="2024-01-03", end="2024-01-09")
        assert result == DateRange(start=date(2024, 1, 3), end=date(2024, 1, 9))

    def test_custom_bounds_override_preset(self):
        result = resolve_range(ANCHOR, preset=7, start="2024-01-03", end="2024-01-04")
        assert result.days == 2

    def test_reversed_bounds_are_normalized(self):
        result = resolve_range(ANCHOR, start="2024-01-09", end="2024-01-03")
        assert result.start == date(2024, 1, 3)
        assert result.end == date(2024, 1, 9)

    def test_single_day_range(self):
        result = resolve_range(ANCHOR, start="2024-01-03", end="2024-01-03")
        assert result.days == 1

    def test_missing_end_falls_back_to_default_preset(self):
        result = resolve_range(ANCHOR, start="2024-01-03")
        assert result == DateRange(start=date(2024, 1, 1), end=ANCHOR)

    def test_missing_start_falls_back_to_default_preset(self):
        result = resolve_range(ANCHOR, preset=7, end="2024-01-03")
        assert result.days == 30

    def test_complete_custom_range_without_anchor(self):
        result = resolve_range(None, start=date(2024, 1, 1), end=date(2024, 1, 2))
        assert result.days == 2

    def test_malformed_custom_bound_raises(self):
        with pytest.raises(InvalidRange):
            resolve_range(ANCHOR, start="2024-01-03", end="01/09/2024")
