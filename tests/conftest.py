"""Shared pytest fixtures for chartkit.

Provides:
- An in-memory host with the four dashboard mount points
- A manually ticked frame clock and a scheduler bound to it
- Writers for throwaway CSV sources
"""

from pathlib import Path
from typing import Callable

import pytest

from chartkit.render_scheduler import ManualFrameClock, RenderScheduler
from chartkit.surface import Container, Host

SELECTORS = ("#scatter-chart", "#donut-chart", "#bar-chart", "#line-chart")

BAR_CSV = """Screen_Tech,Mean(Labelled energy consumption (kWh/year))
LCD,100
LED,120
OLED,176
"""

LINE_CSV = """Year,Average Price (notTas-Snowy)
2018,93.39
2016,58.57
2017,94.62
2020,64.21
2019,95.93
"""

SCATTER_CSV = """brand,screensize,screen_tech,energy_consumpt,star2
SAMSUNG,55,LED-LCD,220,5.5
LG,65,OLED,405,3.5
TCL,32,LCD,54,7
KOGAN,,LCD,38,7
BROKEN,40,LCD,,6
"""


# ===========================================
# HOST & SCHEDULING
# ===========================================


@pytest.fixture
def host() -> Host:
    host = Host()
    for selector in SELECTORS:
        host.mount(Container(selector, 640, 400))
    return host


@pytest.fixture
def container(host) -> Container:
    return host.query("#bar-chart")


@pytest.fixture
def clock() -> ManualFrameClock:
    return ManualFrameClock()


@pytest.fixture
def scheduler(host, clock) -> RenderScheduler:
    return RenderScheduler(clock, host.observe_size)


# ===========================================
# DATA SOURCES
# ===========================================


@pytest.fixture
def write_csv(tmp_path) -> Callable[[str, str], str]:
    """Write CSV text to a temp file and return its path as a source string."""

    def _write(text: str, name: str = "data.csv") -> str:
        path: Path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def bar_source(write_csv) -> str:
    return write_csv(BAR_CSV, "bar.csv")


@pytest.fixture
def line_source(write_csv) -> str:
    return write_csv(LINE_CSV, "line.csv")


@pytest.fixture
def scatter_source(write_csv) -> str:
    return write_csv(SCATTER_CSV, "scatter.csv")
