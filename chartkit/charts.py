import math
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, datetime
from functools import partial
from operator import attrgetter
from typing import List, Optional, Tuple

from chartkit.chart_base import (
    AXIS_TITLE_COLOR, TEXT_COLOR, BaseChartController, ChartConfig, InertController,
    axis_bottom, axis_left, clamp, format_number, tick_decimals,
)
from chartkit.data_pipeline import INVALID, average, coerce_number
from chartkit.interaction import nearest
from chartkit.log import get_logger
from chartkit.palette import DEFAULT_PALETTE, PaletteRegistry, classify, darker
from chartkit.records import Record
from chartkit.render_scheduler import AsyncioFrameClock, RenderScheduler
from chartkit.scale_engine import (
    BAND_PADDING, HEADROOM_BAR, HEADROOM_LINE, HEADROOM_SCATTER,
    band, headroom, linear, tick_count, time,
)
from chartkit.settings import FPS
from chartkit.shapes import Circle, Line, Path, Rect, Shape, Text, path_through, translate

logger = get_logger(__name__)

ENERGY_COLUMN = "Mean(Labelled energy consumption (kWh/year))"
AVERAGE_LINE_COLOR = "#cbd5f5"


def _y_axis(y, inner_w: float, inner_h: float, cfg: ChartConfig) -> List[Shape]:
    ticks = y.ticks(tick_count(inner_h, cfg.y_px_per_tick, cfg.max_y_ticks))
    dec = tick_decimals(ticks)
    return axis_left([(y(t), format_number(t, dec)) for t in ticks], inner_w, inner_h,
                     cfg.y_title, cfg.y_title_offset)


# ==========================================
# 1. BAR CHART
# ==========================================
class BarChart(BaseChartController):
    """Mean labelled energy per screen technology, with a dashed average line."""

    chart_id = "bar"
    config = ChartConfig(min_width=320, min_height=300, margin=(36, 24, 62, 74), headroom=HEADROOM_BAR,
                         y_px_per_tick=60, max_y_ticks=8,
                         x_title="Screen technology", y_title="Mean labelled energy (kWh/year)",
                         x_title_offset=46, y_title_offset=56)

    category_average = 0.0

    def extract(self, row):
        value = coerce_number(row.get(ENERGY_COLUMN))
        if value is None:
            return INVALID
        label = row.get("Screen_Tech")
        return Record(value=value, category=label, key=label)

    def on_loaded(self) -> None:
        self.category_average = average(self.dataset)
        entries = [(r.category, self.palette.color_for(r.category)) for r in self.dataset]
        entries.append((f"Category average: {self.category_average:.0f} kWh", AVERAGE_LINE_COLOR))
        self.container.set_legend(self.chart_id, entries)

    def build(self, width: float, height: float) -> List[Shape]:
        cfg = self.config
        width, height, inner_w, inner_h = cfg.plot_size(width, height)
        top, _, _, left = cfg.margin

        x = band([r.key for r in self.dataset], 0, inner_w, BAND_PADDING)
        y_max = headroom(max(r.value for r in self.dataset), cfg.headroom)
        y = linear(0, y_max, inner_h, 0)

        shapes: List[Shape] = []
        shapes += axis_bottom([(x(c) + x.bandwidth / 2, c) for c in x.categories], inner_w, inner_h,
                              cfg.x_title, cfg.x_title_offset)
        shapes += _y_axis(y, inner_w, inner_h, cfg)

        # Reference line for the category average
        avg_y = y(self.category_average)
        shapes.append(Line(x1=0, y1=avg_y, x2=inner_w, y2=avg_y,
                           style={"stroke": AVERAGE_LINE_COLOR, "stroke_dasharray": "6 6",
                                  "stroke_width": 2, "opacity": 0.85}))

        for r in self.dataset:
            bar_x, bar_w = x.slot(r.key)
            bar_y = y(r.value)
            shapes.append(Rect(x=bar_x, y=bar_y, width=bar_w, height=inner_h - bar_y,
                               style={"fill": self.palette.color_for(r.category), "rx": 10,
                                      "aria_label": f"{r.key} {r.value:.0f} kilowatt hours"},
                               role="presentation", title=f"{r.key}: {r.value:.1f} kWh/year"))

        for r in self.dataset:
            shapes.append(Text(x=x(r.key) + x.bandwidth / 2, y=clamp(y(r.value) - 10, 18, inner_h - 12),
                               text=f"{r.value:.0f} kWh", anchor="middle",
                               title=f"Mean energy use: {r.value:.1f} kWh",
                               style={"font_weight": 600, "fill": TEXT_COLOR, "font_size": "0.9rem"}))

        return translate(shapes, left, top)


# ==========================================
# 2. DONUT CHART
# ==========================================
def _polar(radius: float, angle: float) -> Tuple[float, float]:
    # Angles run clockwise from 12 o'clock
    return radius * math.sin(angle), -radius * math.cos(angle)


def pie_angles(values: List[float], pad_angle: float = 0.02) -> List[Tuple[float, float]]:
    """(start, end) angle per value, in input order, with pad_angle between arcs."""
    total = sum(values)
    n = len(values)
    if n == 0:
        return []
    pad = min(2 * math.pi / n, pad_angle)
    k = (2 * math.pi - n * pad) / total if total > 0 else 0.0
    angles = []
    a0 = 0.0
    for v in values:
        a1 = a0 + v * k + pad
        angles.append((a0 + pad / 2, a1 - pad / 2))
        a0 = a1
    return angles


def arc_path(inner: float, outer: float, a0: float, a1: float) -> str:
    large = 1 if a1 - a0 > math.pi else 0
    ox0, oy0 = _polar(outer, a0)
    ox1, oy1 = _polar(outer, a1)
    ix1, iy1 = _polar(inner, a1)
    ix0, iy0 = _polar(inner, a0)
    return (f"M {ox0:.2f},{oy0:.2f} A {outer:.2f},{outer:.2f} 0 {large} 1 {ox1:.2f},{oy1:.2f} "
            f"L {ix1:.2f},{iy1:.2f} A {inner:.2f},{inner:.2f} 0 {large} 0 {ix0:.2f},{iy0:.2f} Z")


class DonutChart(BaseChartController):
    """Share of average energy draw per screen technology."""

    chart_id = "donut"
    config = ChartConfig(min_width=280, min_height=280, margin=(0, 0, 0, 0))
    inner_ratio = 0.55
    pad_angle = 0.02

    def extract(self, row):
        value = coerce_number(row.get(ENERGY_COLUMN))
        if value is None:
            return INVALID
        label = row.get("Screen_Tech")
        return Record(value=value, category=label, key=label)

    def on_loaded(self) -> None:
        self.container.set_legend(self.chart_id,
                                  [(r.category, self.palette.color_for(r.category)) for r in self.dataset])

    def build(self, width: float, height: float) -> List[Shape]:
        width, height, _, _ = self.config.plot_size(width, height)
        radius = min(width, height) / 2 - 10
        inner = radius * self.inner_ratio

        values = [r.value for r in self.dataset]
        total = sum(values)
        mean = average(self.dataset)

        shapes: List[Shape] = []
        if total > 0:
            arcs = pie_angles(values, self.pad_angle)
            for r, (a0, a1) in zip(self.dataset, arcs):
                share = r.value / total * 100
                shapes.append(Path(d=arc_path(inner, radius, a0, a1),
                                   title=f"{r.category}\nAverage: {r.value:.0f} kWh/year\nShare: {share:.1f}%",
                                   style={"fill": self.palette.color_for(r.category), "stroke": "#ffffff",
                                          "stroke_width": 2, "fill_opacity": 0.92}))

            for r, (a0, a1) in zip(self.dataset, arcs):
                cx, cy = _polar((inner + radius) / 2, (a0 + a1) / 2)
                shapes.append(Text(x=cx, y=cy, text=f"{r.value / total * 100:.0f}%", anchor="middle",
                                   style={"font_size": max(11, radius / 9), "font_weight": 600,
                                          "fill": TEXT_COLOR}))

        shapes.append(Text(x=0, y=6, text="Average kWh", anchor="middle",
                           style={"fill": AXIS_TITLE_COLOR, "font_size": max(12, radius / 8),
                                  "font_weight": 600}))
        shapes.append(Text(x=0, y=30, text=f"{mean:.0f}", anchor="middle",
                           style={"fill": TEXT_COLOR, "font_size": max(14, radius / 6.5),
                                  "font_weight": 700}))

        return translate(shapes, width / 2, height / 2)


# ==========================================
# 3. LINE CHART
# ==========================================
LINE_COLOR = "#EC4899"
HIGHLIGHT_COLOR = "#ef2f88"


@dataclass(frozen=True)
class Focus:
    """Where to put the pointer focus marker, in plot-area pixels."""
    record: Record
    x: float
    y: float
    label: str
    anchor: str  # "start" or "end"


class LineChart(BaseChartController):
    """Average wholesale electricity price over time, with pointer inspection."""

    chart_id = "line"
    config = ChartConfig(min_width=340, min_height=320, margin=(36, 64, 56, 68), headroom=HEADROOM_LINE,
                         x_px_per_tick=80, y_px_per_tick=60, max_x_ticks=10, max_y_ticks=10,
                         x_title="Year", y_title="Average spot price ($ per MWh)",
                         x_title_offset=42, y_title_offset=52)
    highlight_years = (2017, 2022)
    sort_key = attrgetter("key")

    _pass = None  # (x, y, inner_w, inner_h) of the latest render

    def extract(self, row):
        year = coerce_number(row.get("Year"))
        value = coerce_number(row.get("Average Price (notTas-Snowy)"))
        if year is None or value is None:
            return INVALID
        # Fractional years truncate; only years datetime cannot hold are dropped
        year = int(year)
        if not MINYEAR <= year <= MAXYEAR:
            return INVALID
        return Record(value=value, key=datetime(year, 1, 1), attrs={"year": year})

    def build(self, width: float, height: float) -> List[Shape]:
        cfg = self.config
        width, height, inner_w, inner_h = cfg.plot_size(width, height)
        top, _, _, left = cfg.margin
        ds = self.dataset

        x = time(ds[0].key, ds[-1].key, 0, inner_w)
        y = linear(0, headroom(max(r.value for r in ds), cfg.headroom), inner_h, 0)
        self._pass = (x, y, inner_w, inner_h)

        x_ticks = x.ticks(tick_count(inner_w, cfg.x_px_per_tick, cfg.max_x_ticks))
        shapes: List[Shape] = []
        shapes += axis_bottom([(x(t), str(t.year)) for t in x_ticks], inner_w, inner_h,
                              cfg.x_title, cfg.x_title_offset)
        shapes += _y_axis(y, inner_w, inner_h, cfg)

        points = [(x(r.key), y(r.value)) for r in ds]
        area = points + [(points[-1][0], inner_h), (points[0][0], inner_h)]
        shapes.append(Path(d=path_through(area) + " Z", style={"fill": LINE_COLOR, "fill_opacity": 0.18}))
        shapes.append(Path(d=path_through(points),
                           style={"fill": "none", "stroke": LINE_COLOR, "stroke_width": 3,
                                  "stroke_linejoin": "round", "stroke_linecap": "round"}))

        for r, (px, py) in zip(ds, points):
            if r.attrs["year"] in self.highlight_years:
                shapes.append(Circle(cx=px, cy=py, r=5, title=self._label(r, " per MWh"),
                                     style={"fill": HIGHLIGHT_COLOR, "stroke": "#fff", "stroke_width": 2}))

        last = len(ds) - 1
        for i, (r, (px, py)) in enumerate(zip(ds, points)):
            shapes.append(Circle(cx=px, cy=py, r=3, title=self._label(r, " per MWh"),
                                 style={"fill": LINE_COLOR, "opacity": 1 if i == last else 0.5}))

        latest = ds[-1]
        latest_x, latest_y = points[-1]
        offset = -20 if latest_x > inner_w * 0.7 else 20
        shapes.append(Text(x=clamp(latest_x + offset, 18, inner_w - 18), y=clamp(latest_y - 28, 22, inner_h - 22),
                           text=f"{latest.attrs['year']} average: ${latest.value:.0f}",
                           anchor="end" if offset < 0 else "start",
                           style={"fill": LINE_COLOR, "font_weight": 700, "font_size": 14}))

        return translate(shapes, left, top)

    @staticmethod
    def _label(r: Record, suffix: str = "") -> str:
        return f"{r.attrs['year']}: ${r.value:.0f}{suffix}"

    def inspect(self, pointer_x: float) -> Optional[Focus]:
        """
        Nearest record to a pointer at plot-area x = pointer_x, using the
        scales of the most recent render. None before the first render.
        """
        if self.disposed or not self.dataset or self._pass is None:
            return None
        x, y, inner_w, inner_h = self._pass
        datum = nearest(self.dataset, x.invert(pointer_x))

        px = clamp(x(datum.key), 0, inner_w)
        py = clamp(y(datum.value), 0, inner_h)
        on_right = px > inner_w * 0.7
        return Focus(record=datum, x=px, y=py, label=self._label(datum), anchor="end" if on_right else "start")


def focus_marker(focus: Focus, config: ChartConfig = LineChart.config) -> List[Shape]:
    """Marker shapes for a Focus, in container coordinates."""
    top, _, _, left = config.margin
    dx = -12 if focus.anchor == "end" else 12
    marker = [
        Circle(cx=focus.x, cy=focus.y, r=6, style={"fill": "#ffffff", "stroke": "#ec4899", "stroke_width": 2}),
        Text(x=focus.x + dx, y=focus.y - 12, text=focus.label, anchor=focus.anchor,
             style={"font_weight": 600, "fill": "#334155"}),
    ]
    return translate(marker, left, top)


# ==========================================
# 4. SCATTER CHART
# ==========================================
class ScatterChart(BaseChartController):
    """Energy consumption against star rating, coloured by screen technology."""

    chart_id = "scatter"
    config = ChartConfig(min_width=320, min_height=280, margin=(30, 28, 62, 68), headroom=HEADROOM_SCATTER,
                         x_px_per_tick=70, y_px_per_tick=50, max_x_ticks=10, max_y_ticks=10,
                         x_title="Star Rating (energy efficiency)",
                         y_title="Labelled energy consumption (kWh/year)",
                         x_title_offset=48, y_title_offset=52)
    x_pad = 0.2

    def extract(self, row):
        energy = coerce_number(row.get("energy_consumpt"))
        star_rating = coerce_number(row.get("star2"))
        if energy is None or star_rating is None:
            return INVALID
        return Record(value=(star_rating, energy), category=classify(row.get("screen_tech")),
                      attrs={"screen_size": coerce_number(row.get("screensize")),
                             "brand": row.get("brand") or ""})

    def on_loaded(self) -> None:
        self.container.set_legend(self.chart_id, self.palette.entries())

    @staticmethod
    def radius(screen_size: Optional[float]) -> float:
        if screen_size is None:
            return 3.5
        return clamp(screen_size / 14, 3.5, 8)

    def build(self, width: float, height: float) -> List[Shape]:
        cfg = self.config
        width, height, inner_w, inner_h = cfg.plot_size(width, height)
        top, _, _, left = cfg.margin

        ratings = [r.value[0] for r in self.dataset]
        x = linear(min(ratings) - self.x_pad, max(ratings) + self.x_pad, 0, inner_w)
        y = linear(0, headroom(max(r.value[1] for r in self.dataset), cfg.headroom), inner_h, 0)

        x_ticks = x.ticks(tick_count(inner_w, cfg.x_px_per_tick, cfg.max_x_ticks))
        x_dec = tick_decimals(x_ticks)
        shapes: List[Shape] = []
        shapes += axis_bottom([(x(t), format_number(t, x_dec)) for t in x_ticks], inner_w, inner_h,
                              cfg.x_title, cfg.x_title_offset, grid=True)
        shapes += _y_axis(y, inner_w, inner_h, cfg)

        for r in self.dataset:
            star, energy = r.value
            color = self.palette.color_for(r.category)
            size = r.attrs["screen_size"]
            size_text = format_number(size, 1) if size is not None else "?"
            shapes.append(Circle(cx=x(star), cy=y(energy), r=self.radius(size),
                                 title=(f"{r.attrs['brand']} · {size_text}\" {r.category}\n"
                                        f"Star rating: {format_number(star, 1)}\nEnergy: {energy:.0f} kWh"),
                                 style={"fill": color, "fill_opacity": 0.7, "stroke": darker(color, 0.6),
                                        "stroke_width": 1, "stroke_opacity": 0.6}))

        return translate(shapes, left, top)


# ==========================================
# MOUNTING
# ==========================================
def default_scheduler(host) -> RenderScheduler:
    return RenderScheduler(AsyncioFrameClock(FPS), host.observe_size)


def init_chart(chart_cls, host, selector: str, source: str, scheduler: Optional[RenderScheduler] = None,
               palette: PaletteRegistry = DEFAULT_PALETTE, on_error=None, client=None):
    """
    Mount a chart on `selector`. A missing mount point is not an error: an
    inert controller is returned and nothing is loaded or observed.
    """
    container = host.query(selector)
    if container is None:
        logger.warning(f"No container for {selector}; {chart_cls.chart_id} chart not mounted")
        return InertController()
    return chart_cls(container, source, scheduler or default_scheduler(host),
                     palette=palette, on_error=on_error, client=client)


init_bar_chart = partial(init_chart, BarChart)
init_donut_chart = partial(init_chart, DonutChart)
init_line_chart = partial(init_chart, LineChart)
init_scatter_chart = partial(init_chart, ScatterChart)
