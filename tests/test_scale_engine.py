"""Tests for the linear, band and time scales."""

from datetime import datetime

import pytest

from chartkit.scale_engine import (
    BAND_PADDING, band, get_nice_step, headroom, linear, nice_domain, tick_count, tick_values, time,
)


class TestNiceNumbers:
    @pytest.mark.parametrize("raw, expected", [(1.2, 1), (2.0, 2), (4.0, 5), (8.0, 10), (19.7, 20), (0.03, 0.02)])
    def test_nice_step(self, raw, expected):
        assert get_nice_step(raw) == pytest.approx(expected)

    def test_nice_step_rejects_nonpositive(self):
        assert get_nice_step(0) == 1.0

    def test_nice_domain_widens_to_step(self):
        assert nice_domain(0, 197.12) == (0, 200)
        assert nice_domain(3.3, 7.2) == (3.0, 7.5)

    def test_nice_domain_degenerate(self):
        assert nice_domain(5, 5) == (5, 5)

    def test_tick_values_inside_domain(self):
        ticks = tick_values(0, 200, 8)
        assert ticks[0] == 0 and ticks[-1] == 200
        assert all(0 <= t <= 200 for t in ticks)


class TestTickCount:
    def test_one_per_spacing(self):
        assert tick_count(500, 80, 10) == 6

    def test_halves_round_up(self):
        assert tick_count(150, 60, 10) == 3

    def test_clamped_to_two(self):
        assert tick_count(50, 80, 10) == 2

    def test_clamped_to_max(self):
        assert tick_count(5000, 80, 10) == 10


class TestLinear:
    def test_maps_domain_to_range(self):
        x = linear(0, 100, 0, 500)
        assert x(0) == 0
        assert x(50) == 250
        assert x(100) == 500

    def test_inverted_range_for_y(self):
        y = linear(0, 200, 300, 0)
        assert y(0) == 300
        assert y(200) == 0

    def test_invert(self):
        x = linear(0, 100, 0, 500)
        assert x.invert(125) == pytest.approx(25)

    def test_nice_extends_domain(self):
        y = linear(0, headroom(176, 1.12), 300, 0)
        assert y.domain == (0, 200)

    def test_degenerate_domain_maps_to_middle(self):
        x = linear(5, 5, 0, 100)
        assert x(5) == 50


class TestBand:
    def test_three_categories(self):
        x = band(["LCD", "LED", "OLED"], 0, 300, BAND_PADDING)
        assert x.step == 100
        assert x.bandwidth == pytest.approx(68)
        assert x("LCD") == pytest.approx(16)
        assert x("OLED") == pytest.approx(216)

    def test_bands_stay_inside_range(self):
        x = band(["a", "b", "c", "d"], 0, 410)
        for c in x.categories:
            left, width = x.slot(c)
            assert 0 <= left and left + width <= 410

    def test_repeated_labels_share_a_slot(self):
        x = band(["a", "b", "a"], 0, 200)
        assert x.categories == ("a", "b")

    def test_unknown_category(self):
        with pytest.raises(KeyError):
            band(["a"], 0, 100)("b")


class TestTime:
    def test_maps_dates(self):
        x = time(datetime(2016, 1, 1), datetime(2020, 1, 1), 0, 400)
        assert x(datetime(2016, 1, 1)) == 0
        assert x(datetime(2020, 1, 1)) == pytest.approx(400)
        assert x(datetime(2018, 1, 1)) == pytest.approx(200, abs=1)

    def test_invert_returns_datetime(self):
        x = time(datetime(2016, 1, 1), datetime(2020, 1, 1), 0, 400)
        assert x.invert(0) == datetime(2016, 1, 1)

    def test_year_ticks(self):
        x = time(datetime(2016, 1, 1), datetime(2020, 1, 1), 0, 400)
        assert [t.year for t in x.ticks(4)] == [2016, 2017, 2018, 2019, 2020]
        assert [t.year for t in x.ticks(2)] == [2016, 2018, 2020]

    def test_nice_rounds_to_year_boundaries(self):
        x = time(datetime(2016, 3, 1), datetime(2019, 6, 1), 0, 100, nice=True)
        assert x.domain == (datetime(2016, 1, 1), datetime(2020, 1, 1))
