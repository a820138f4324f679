"""Tests for free-text date normalization."""

from datetime import date

import pytest

from rootline.family import dates
from rootline.family.dates import DateRange, expand_two_digit_year

TODAY = date(2024, 6, 1)


class TestNormalize:
    @pytest.mark.parametrize(
        ("raw", "display", "start", "end"),
        [
            ("1950", "1950", date(1950, 1, 1), date(1950, 12, 31)),
            ("1950-03-14", "1950-03-14", date(1950, 3, 14), date(1950, 3, 14)),
            ("1950-03", "1950-03", date(1950, 3, 1), date(1950, 3, 31)),
            ("14 March 1950", "1950-03-14", date(1950, 3, 14), date(1950, 3, 14)),
            ("March 14, 1950", "1950-03-14", date(1950, 3, 14), date(1950, 3, 14)),
            ("Feb 1952", "1952-02", date(1952, 2, 1), date(1952, 2, 29)),
            ("14/03/1950", "1950-03-14", date(1950, 3, 14), date(1950, 3, 14)),
            ("circa 1875", "circa 1875", date(1875, 1, 1), date(1875, 12, 31)),
            ("c. 1875", "circa 1875", date(1875, 1, 1), date(1875, 12, 31)),
            ("1940s", "1940s", date(1940, 1, 1), date(1949, 12, 31)),
            ("1950 AD", "1950", date(1950, 1, 1), date(1950, 12, 31)),
        ],
    )
    def test_recognized_forms(self, raw, display, start, end):
        result = dates.normalize(raw, today=TODAY)
        assert result.display == display
        assert result.range == DateRange(start, end)
        assert result.original == raw

    def test_season_spans_three_months(self):
        result = dates.normalize("Summer 1961", today=TODAY)
        assert result.display == "Summer 1961"
        assert result.range == DateRange(date(1961, 6, 1), date(1961, 8, 31))

    def test_winter_crosses_year_end(self):
        result = dates.normalize("winter 1961", today=TODAY)
        assert result.range == DateRange(date(1961, 12, 1), date(1962, 2, 28))

    def test_short_decade(self):
        result = dates.normalize("'60s", today=TODAY)
        assert result.display == "1960s"

    def test_date_inside_prose(self):
        result = dates.normalize("born around 1950 in Leeds", today=TODAY)
        assert result.display == "1950"

    def test_unrecognized_keeps_text(self):
        result = dates.normalize("  the year of the flood ", today=TODAY)
        assert result.range is None
        assert result.display == "the year of the flood"
        assert not result.parsed

    def test_empty_input(self):
        assert dates.normalize(None).display == ""
        assert dates.normalize("   ").range is None

    def test_invalid_calendar_day_is_unparsed(self):
        assert dates.normalize("1950-02-30", today=TODAY).range is None

    def test_year_outside_window_is_unparsed(self):
        assert dates.normalize("1066", today=TODAY).range is None
        assert dates.normalize("2500", today=TODAY).range is None

    def test_year_property(self):
        assert dates.normalize("14 March 1950").year == 1950
        assert dates.normalize("nonsense").year is None


class TestTwoDigitYears:
    def test_recent_years_stay_in_this_century(self):
        assert expand_two_digit_year(24, TODAY) == 2024

    def test_older_years_go_to_last_century(self):
        assert expand_two_digit_year(50, TODAY) == 1950


class TestHelpers:
    def test_display_returns_none_for_empty(self):
        assert dates.display("") is None
        assert dates.display("1950") == "1950"

    def test_sort_key_puts_unknown_last(self):
        values = ["nonsense", "1960", "1940s", None]
        ordered = sorted(values, key=dates.sort_key)
        assert ordered[:2] == ["1940s", "1960"]

    def test_overlaps_with_missing_range(self):
        year = dates.normalize("1950").range
        assert dates.overlaps(year, None)
        assert dates.overlaps(None, None)

    def test_whole_years_do_not_overlap(self):
        assert not dates.overlaps(
            dates.normalize("1950").range, dates.normalize("1951").range
        )

    def test_widened_range(self):
        widened = dates.normalize("1950").range.widened(1)
        assert widened == DateRange(date(1949, 1, 1), date(1951, 12, 31))
        assert widened.overlaps(dates.normalize("1951").range)


class TestDisplayIsStable:
    @pytest.mark.parametrize(
        "raw",
        [
            "1950",
            "1950-03-14",
            "1950-03",
            "3rd March 1950",
            "March 3, 1950",
            "Mar 50",
            "14/03/1950",
            "3.4.62",
            "1950/03/14",
            "circa 1875",
            "c. 75",
            "1940s",
            "'60s",
            "90s",
            "Spring 1950",
            "summer 62",
            "Winter 1961",
            "1950 AD",
            "1875 CE",
            "born around 1950 in Leeds",
        ],
    )
    def test_display_normalizes_to_the_same_range(self, raw):
        first = dates.normalize(raw, today=TODAY)
        again = dates.normalize(first.display, today=TODAY)

        assert first.range is not None
        assert again.display == first.display
        assert again.range == first.range


class TestWindow:
    def test_decade_ends_at_last_year(self):
        result = dates.normalize("2100s", today=TODAY)
        assert result.range == DateRange(date(2100, 1, 1), date(2100, 12, 31))

    def test_winter_ends_at_last_year(self):
        result = dates.normalize("winter 2100", today=TODAY)
        assert result.range == DateRange(date(2100, 12, 1), date(2100, 12, 31))


class TestShortDecades:
    def test_nineties_expand_to_last_century(self):
        result = dates.normalize("90s", today=TODAY)
        assert result.display == "1990s"
        assert result.range == DateRange(date(1990, 1, 1), date(1999, 12, 31))
