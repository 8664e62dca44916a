"""
Small-multiples dashboard: mounts the four charts on their containers, loads
them concurrently and tears every one down together.
"""

import asyncio
from typing import Dict, List, Optional

from chartkit.charts import BarChart, DonutChart, LineChart, ScatterChart, init_chart
from chartkit.log import get_logger
from chartkit.palette import DEFAULT_PALETTE, PaletteRegistry
from chartkit.render_scheduler import RenderScheduler
from chartkit.settings import BAR_SOURCE, DONUT_SOURCE, LINE_SOURCE, SCATTER_SOURCE, data_source

logger = get_logger(__name__)

# selector -> (chart class, data file)
LAYOUT = {
    "#scatter-chart": (ScatterChart, SCATTER_SOURCE),
    "#donut-chart": (DonutChart, DONUT_SOURCE),
    "#bar-chart": (BarChart, BAR_SOURCE),
    "#line-chart": (LineChart, LINE_SOURCE),
}


class Dashboard:
    def __init__(self, host, scheduler: RenderScheduler, palette: PaletteRegistry = DEFAULT_PALETTE,
                 layout: Optional[Dict] = None, client=None):
        self.host = host
        self.scheduler = scheduler
        self.palette = palette
        self.layout = layout or LAYOUT
        self.client = client
        self.errors: Dict[str, Exception] = {}
        self.controllers: Dict[str, object] = {}

    def mount(self) -> List[object]:
        for selector, (chart_cls, source) in self.layout.items():
            self.controllers[selector] = init_chart(
                chart_cls, self.host, selector, data_source(source), self.scheduler,
                palette=self.palette, client=self.client,
                on_error=lambda exc, sel=selector: self.errors.__setitem__(sel, exc),
            )
        return list(self.controllers.values())

    async def start(self) -> List[object]:
        """Mount (if needed) and load every chart; failures leave that chart empty."""
        if not self.controllers:
            self.mount()
        await asyncio.gather(*(c.load() for c in self.controllers.values()))
        if self.errors:
            logger.warning(f"{len(self.errors)} chart(s) failed to load: {', '.join(self.errors)}")
        return list(self.controllers.values())

    def destroy(self) -> None:
        for controller in self.controllers.values():
            controller.destroy()
