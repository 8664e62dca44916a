"""
Scale engine: domain -> pixel mappings shared by every chart.

Scales are cheap immutable objects. Charts rebuild them on every render pass
from the current container extent; they must never be cached across resizes.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Sequence, Tuple

# Observed headroom factors above the tallest data point
HEADROOM_BAR = 1.12
HEADROOM_LINE = 1.12
HEADROOM_SCATTER = 1.08

BAND_PADDING = 0.32


def get_nice_step(raw_step: float) -> float:
    """Round a raw step up/down to 1, 2, 5 or 10 times a power of ten."""
    if raw_step <= 0 or not math.isfinite(raw_step):
        return 1.0
    magnitude = 10 ** math.floor(math.log10(raw_step))
    residual = raw_step / magnitude
    if residual < 1.5:
        nice = 1
    elif residual < 3.5:
        nice = 2
    elif residual < 7.5:
        nice = 5
    else:
        nice = 10
    return nice * magnitude


def _clean(val: float) -> float:
    # Trim float noise from step multiplication (0.30000000000000004)
    return round(val, 10) + 0.0


def nice_domain(lo: float, hi: float, count: int = 10) -> Tuple[float, float]:
    """
    Widen [lo, hi] outwards to multiples of a nice step.

    The step is recomputed from the widened domain until it stops changing,
    so the bounds end up aligned to the step actually used for ticks.
    """
    if hi < lo:
        lo, hi = hi, lo
    if hi == lo or count <= 0:
        return lo, hi

    prev_step = None
    for _ in range(10):
        step = get_nice_step((hi - lo) / count)
        if step == prev_step:
            break
        lo = _clean(math.floor(lo / step) * step)
        hi = _clean(math.ceil(hi / step) * step)
        prev_step = step
    return lo, hi


def headroom(raw_max: float, factor: float) -> float:
    """Leave visual breathing room above the tallest data point."""
    return raw_max * factor


def tick_count(pixel_length: float, px_per_tick: float, max_ticks: int) -> int:
    """Ticks that fit the axis at one per px_per_tick, within [2, max_ticks]."""
    if px_per_tick <= 0:
        return max_ticks
    # Halves round up
    return max(2, min(max_ticks, math.floor(pixel_length / px_per_tick + 0.5)))


def tick_values(lo: float, hi: float, count: int) -> List[float]:
    if count <= 0 or not (math.isfinite(lo) and math.isfinite(hi)):
        return []
    if hi == lo:
        return [lo]
    step = get_nice_step(abs(hi - lo) / count)
    low, high = min(lo, hi), max(lo, hi)
    start = math.ceil(low / step - 1e-9)
    stop = math.floor(high / step + 1e-9)
    return [_clean(i * step) for i in range(start, stop + 1)]


# ==========================================
# 1. LINEAR
# ==========================================
@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d1 == d0:
            return (r0 + r1) / 2
        return r0 + (value - d0) / (d1 - d0) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if r1 == r0:
            return (d0 + d1) / 2
        return d0 + (pixel - r0) / (r1 - r0) * (d1 - d0)

    def ticks(self, count: int = 10) -> List[float]:
        return tick_values(self.domain[0], self.domain[1], count)


def linear(domain_min: float, domain_max: float, range_min: float, range_max: float,
           nice: bool = True, count: int = 10) -> LinearScale:
    if nice:
        domain_min, domain_max = nice_domain(domain_min, domain_max, count)
    return LinearScale((domain_min, domain_max), (range_min, range_max))


# ==========================================
# 2. BAND
# ==========================================
@dataclass(frozen=True)
class BandScale:
    """
    Splits the range into one equal slot per category. Each band sits centred
    in its slot and is narrowed by `padding` (a fraction of the slot width),
    so adjacent bands are separated by padding * slot and the slots tile the
    whole range.
    """
    categories: Tuple[str, ...]
    range: Tuple[float, float]
    padding: float = BAND_PADDING
    _index: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {c: i for i, c in enumerate(self.categories)})

    @property
    def step(self) -> float:
        n = len(self.categories)
        return (self.range[1] - self.range[0]) / n if n else 0.0

    @property
    def bandwidth(self) -> float:
        return self.step * (1 - self.padding)

    def __call__(self, category: str) -> float:
        i = self._index[category]
        return self.range[0] + i * self.step + self.step * self.padding / 2

    def slot(self, category: str) -> Tuple[float, float]:
        """(left edge, width) of the band for this category."""
        return self(category), self.bandwidth


def band(categories: Sequence[str], range_min: float, range_max: float,
         padding: float = BAND_PADDING) -> BandScale:
    # Repeated labels share a slot
    unique = tuple(dict.fromkeys(categories))
    return BandScale(unique, (range_min, range_max), padding)


# ==========================================
# 3. TIME
# ==========================================
@dataclass(frozen=True)
class TimeScale:
    domain: Tuple[datetime, datetime]
    range: Tuple[float, float]

    @property
    def _linear(self) -> LinearScale:
        return LinearScale((self.domain[0].timestamp(), self.domain[1].timestamp()), self.range)

    def __call__(self, value: datetime) -> float:
        return self._linear(value.timestamp())

    def invert(self, pixel: float) -> datetime:
        return datetime.fromtimestamp(self._linear.invert(pixel))

    def ticks(self, count: int = 10) -> List[datetime]:
        """Year starts inside the domain, spaced by a nice number of years."""
        first, last = self.domain
        span = last.year - first.year
        step = max(1, int(get_nice_step(span / count))) if count > 0 and span > 0 else 1
        start = first.year if _year_start(first.year) >= first else first.year + 1
        start += (-start) % step
        return [_year_start(y) for y in range(start, last.year + 1, step)
                if _year_start(y) <= last]


def _year_start(year: int) -> datetime:
    return datetime(year, 1, 1)


def time(domain_min: datetime, domain_max: datetime, range_min: float, range_max: float,
         nice: bool = False) -> TimeScale:
    if nice:
        domain_min = _year_start(domain_min.year)
        if domain_max != _year_start(domain_max.year):
            domain_max = _year_start(domain_max.year + 1)
    return TimeScale((domain_min, domain_max), (range_min, range_max))
