import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from chartkit.data_pipeline import DataPipeline
from chartkit.errors import DataLoadError
from chartkit.log import get_logger
from chartkit.palette import DEFAULT_PALETTE, PaletteRegistry
from chartkit.records import Dataset, EMPTY, Record
from chartkit.render_scheduler import RenderScheduler, RenderSubscription
from chartkit.shapes import Line, Shape, Text

logger = get_logger(__name__)

GRID_COLOR = "#E2E8F0"
AXIS_TITLE_COLOR = "#52606d"
TEXT_COLOR = "#1f2933"


@dataclass
class ChartConfig:
    min_width: float = 320.0
    min_height: float = 300.0
    margin: Tuple[float, float, float, float] = (36.0, 24.0, 62.0, 74.0)  # top, right, bottom, left
    headroom: float = 1.12

    # Ticks: one per N pixels, capped
    x_px_per_tick: float = 80.0
    y_px_per_tick: float = 60.0
    max_x_ticks: int = 10
    max_y_ticks: int = 10

    x_title: str = ""
    y_title: str = ""
    x_title_offset: float = 46.0
    y_title_offset: float = 56.0

    def plot_size(self, width: float, height: float) -> Tuple[float, float, float, float]:
        """Clamp container size to the minimums; returns (width, height, inner_w, inner_h)."""
        width = max(width, self.min_width)
        height = max(height, self.min_height)
        top, right, bottom, left = self.margin
        return width, height, width - left - right, height - top - bottom


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def format_number(val: float, decimals: int = 0) -> str:
    if abs(val) < 1e-10: val = 0.0
    if abs(val - round(val)) < 1e-9:
        return f"{int(round(val))}"
    return f"{val:.{decimals}f}"


def tick_decimals(ticks: List[float]) -> int:
    """Enough decimals to tell adjacent ticks apart."""
    if len(ticks) < 2:
        return 0
    step = abs(ticks[1] - ticks[0])
    return max(0, -int(math.floor(math.log10(step)))) if step > 0 else 0


# ==========================================
# AXES
# ==========================================
def axis_bottom(positions: List[Tuple[float, str]], inner_w: float, inner_h: float, title: str = "",
                title_offset: float = 46.0, grid: bool = False) -> List[Shape]:
    shapes: List[Shape] = []
    for px, label in positions:
        if grid:
            shapes.append(Line(x1=px, y1=0, x2=px, y2=inner_h, style={"stroke": GRID_COLOR}))
        else:
            shapes.append(Line(x1=px, y1=inner_h, x2=px, y2=inner_h + 6, style={"stroke": GRID_COLOR}))
        shapes.append(Text(x=px, y=inner_h + 20, text=label, anchor="middle",
                           style={"font_size": 11, "fill": AXIS_TITLE_COLOR}))
    if title:
        shapes.append(Text(x=inner_w / 2, y=inner_h + title_offset, text=title, anchor="middle",
                           style={"fill": AXIS_TITLE_COLOR, "font_weight": 600}))
    return shapes


def axis_left(positions: List[Tuple[float, str]], inner_w: float, inner_h: float, title: str = "",
              title_offset: float = 56.0) -> List[Shape]:
    shapes: List[Shape] = []
    for py, label in positions:
        # Gridline across the plot for every tick
        shapes.append(Line(x1=0, y1=py, x2=inner_w, y2=py, style={"stroke": GRID_COLOR}))
        shapes.append(Text(x=-9, y=py + 4, text=label, anchor="end",
                           style={"font_size": 11, "fill": AXIS_TITLE_COLOR}))
    if title:
        shapes.append(Text(x=-title_offset, y=inner_h / 2, text=title, anchor="middle", rotation=-90,
                           style={"fill": AXIS_TITLE_COLOR, "font_weight": 600}))
    return shapes


# ==========================================
# CONTROLLERS
# ==========================================
class InertController:
    """Returned when the mount point is missing. Nothing to load or tear down."""

    chart_id = "inert"
    dataset: Dataset = EMPTY
    disposed = False

    async def load(self) -> Dataset:
        return EMPTY

    def render(self, size=None) -> None:
        pass

    def destroy(self) -> None:
        pass


class BaseChartController:
    """
    load -> render -> listen lifecycle for one chart in one container.

    Subclasses provide `extract` (row -> Record | INVALID) and `build`
    (current dataset + pixel size -> shapes). `build` must recreate every
    scale from the size it is given.
    """

    chart_id = "chart"
    config = ChartConfig()
    sort_key: Optional[Callable[[Record], object]] = None

    def __init__(self, container, source: str, scheduler: RenderScheduler,
                 palette: PaletteRegistry = DEFAULT_PALETTE,
                 on_error: Optional[Callable[[Exception], None]] = None,
                 client=None):
        self.container = container
        self.source = source
        self.palette = palette
        self.on_error = on_error
        self.dataset: Dataset = EMPTY
        self.load_error: Optional[DataLoadError] = None
        self.disposed = False
        self.pipeline = DataPipeline(self.extract, sort_key=self.sort_key, client=client)
        self.subscription: RenderSubscription = scheduler.watch(container, self.render)

    # --- hooks ---
    def extract(self, row):
        raise NotImplementedError

    def build(self, width: float, height: float) -> List[Shape]:
        raise NotImplementedError

    def on_loaded(self) -> None:
        """Called once after a successful load, before the first render."""

    # --- lifecycle ---
    async def load(self) -> Dataset:
        try:
            dataset = await self.pipeline.load(self.source)
        except DataLoadError as e:
            if self.disposed:
                return EMPTY
            logger.error(f"[{self.chart_id}] {e}")
            self.load_error = e
            self.dataset = EMPTY
            self.container.clear(self.chart_id)
            if self.on_error is not None:
                self.on_error(e)
            return self.dataset

        if self.disposed:
            return dataset
        self.dataset = dataset
        self.load_error = None
        self.on_loaded()
        self.subscription.request()
        return self.dataset

    def render(self, size: Optional[Tuple[float, float]] = None) -> None:
        if self.disposed or not self.container.attached:
            return
        if not self.dataset:
            return
        width, height, _, _ = self.config.plot_size(*(size if size is not None else self.container.bounds()))
        self.container.draw(self.build(width, height), (width, height))
        self.container.mark_ready()

    def destroy(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.subscription.dispose()
        logger.debug(f"[{self.chart_id}] destroyed")
