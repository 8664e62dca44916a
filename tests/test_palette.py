"""Tests for the palette registry and screen technology classification."""

import pytest

from chartkit.errors import ChartError, UnknownCategoryError
from chartkit.palette import DEFAULT_PALETTE, SCREEN_TECH_PALETTE, PaletteRegistry, classify, darker


class TestClassify:
    @pytest.mark.parametrize("label, expected", [
        ("OLED", "OLED"),
        ("OLED-55", "OLED"),
        ("Edge LED", "LED"),
        ("oled evo", "OLED"),
        ("LED-LCD", "LED"),
        ("LCD (LED)", "LED"),
        ("LCD", "LCD"),
        ("Plasma", "LCD"),
        ("", "LCD"),
        (None, "LCD"),
    ])
    def test_labels(self, label, expected):
        assert classify(label) == expected

    def test_result_always_in_palette(self):
        for label in ("QLED", "micro-led", "CRT"):
            assert classify(label) in DEFAULT_PALETTE


class TestPaletteRegistry:
    def test_known_colours(self):
        assert DEFAULT_PALETTE.color_for("LCD") == "#2563eb"
        assert DEFAULT_PALETTE.color_for("LED") == "#f97316"
        assert DEFAULT_PALETTE.color_for("OLED") == "#16a34a"

    def test_unknown_category(self):
        with pytest.raises(UnknownCategoryError) as exc:
            DEFAULT_PALETTE.color_for("Plasma")
        assert exc.value.category == "Plasma"
        assert isinstance(exc.value, LookupError)
        assert isinstance(exc.value, ChartError)

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_PALETTE.table["QLED"] = "#000000"

    def test_source_dict_changes_do_not_leak(self):
        table = dict(SCREEN_TECH_PALETTE)
        palette = PaletteRegistry(table)
        table["QLED"] = "#000000"
        assert "QLED" not in palette
        assert len(palette) == 3

    def test_entries_in_registration_order(self):
        assert [label for label, _ in DEFAULT_PALETTE.entries()] == ["LCD", "LED", "OLED"]


class TestDarker:
    def test_scales_channels(self):
        assert darker("#646464") == "#464646"

    def test_zero_is_identity(self):
        assert darker("#2563eb", 0) == "#2563eb"

    def test_rejects_short_hex(self):
        with pytest.raises(ValueError):
            darker("#fff")
