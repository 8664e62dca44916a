"""
Palette registry: one fixed category -> colour table shared by every chart.

The table is built once at import and never changes. Looking up a category
that is not in the table is an error rather than a silent default, so that
labels must be classified upstream (see `classify`).
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from chartkit.errors import UnknownCategoryError

SCREEN_TECH_PALETTE: Dict[str, str] = {
    "LCD": "#2563eb",
    "LED": "#f97316",
    "OLED": "#16a34a",
}

OLED, LED, LCD = "OLED", "LED", "LCD"

# d3's colour brightening constant
DARKER = 0.7


class PaletteRegistry:
    def __init__(self, table: Mapping[str, str]):
        # Copy first so later edits to the caller's dict can't leak in
        self._table = MappingProxyType(dict(table))

    def __contains__(self, category) -> bool:
        return category in self._table

    def __len__(self) -> int:
        return len(self._table)

    @property
    def table(self) -> Mapping[str, str]:
        return self._table

    def color_for(self, category: str) -> str:
        try:
            return self._table[category]
        except KeyError:
            raise UnknownCategoryError(category) from None

    def entries(self) -> List[Tuple[str, str]]:
        """(label, colour) pairs in registration order, for legends."""
        return list(self._table.items())


DEFAULT_PALETTE = PaletteRegistry(SCREEN_TECH_PALETTE)


def classify(raw_label: Optional[str]) -> str:
    """
    Map a free-text screen technology label onto OLED, LED or LCD.

    "oled" is checked before "led" because every OLED label also contains
    "led". Anything else, including blanks, falls back to LCD.
    """
    normalised = (raw_label or "").lower()
    if "oled" in normalised:
        return OLED
    if "led" in normalised:
        return LED
    return LCD


def darker(color: str, k: float = 1.0) -> str:
    """Darken a #rrggbb colour by DARKER ** k per channel."""
    hex_color = color.lstrip("#")
    if len(hex_color) != 6:
        raise ValueError(f"Expected a #rrggbb colour, got {color!r}")
    factor = DARKER ** k
    channels = [int(hex_color[i:i + 2], 16) for i in (0, 2, 4)]
    return "#" + "".join(f"{max(0, min(255, round(c * factor))):02x}" for c in channels)
