"""
Host surface: mount points, size-change signals and the SVG render target.

A Host plays the part of the page: it resolves selectors to Containers and
provides a window-level resize signal. Containers can be observed directly
when the host supports per-container observation; otherwise observers fall
back to the window signal.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple

import svgwrite

from chartkit.log import get_logger
from chartkit.shapes import Circle, Line, Path, Rect, Shape, Text

logger = get_logger(__name__)

SizeCallback = Callable[[Optional[Tuple[float, float]]], None]


class Container:
    def __init__(self, selector: str, width: float, height: float):
        self.selector = selector
        self.width = float(width)
        self.height = float(height)
        self.attached = True
        self.ready = False
        self.shapes: List[Shape] = []
        self.legends: Dict[str, List[Tuple[str, str]]] = {}
        self.draw_count = 0
        self.canvas_size: Tuple[float, float] = (self.width, self.height)
        self._observers: List[SizeCallback] = []

    def bounds(self) -> Tuple[float, float]:
        return self.width, self.height

    def resize(self, width: float, height: float) -> None:
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = float(width), float(height)
        for callback in list(self._observers):
            callback((self.width, self.height))

    def add_resize_observer(self, callback: SizeCallback) -> None:
        self._observers.append(callback)

    def remove_resize_observer(self, callback: SizeCallback) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def draw(self, shapes: Sequence[Shape], canvas_size: Optional[Tuple[float, float]] = None) -> None:
        """
        Replace the container's content. `canvas_size` is the drawing's own
        extent when the chart clamped the container size. Ignored once detached.
        """
        if not self.attached:
            return
        self.shapes = list(shapes)
        self.canvas_size = canvas_size or self.bounds()
        self.draw_count += 1

    def mark_ready(self) -> None:
        if self.attached:
            self.ready = True

    def set_legend(self, chart_id: str, entries: Sequence[Tuple[str, str]]) -> None:
        if self.attached:
            self.legends[chart_id] = list(entries)

    def clear(self, chart_id: Optional[str] = None) -> None:
        """Back to the empty, not-ready state. Ignored once detached."""
        if not self.attached:
            return
        self.shapes = []
        self.ready = False
        if chart_id is not None:
            self.legends.pop(chart_id, None)

    def detach(self) -> None:
        self.attached = False
        self._observers.clear()

    def to_svg(self) -> str:
        return render_svg(self.shapes, *self.canvas_size)


class Host:
    def __init__(self, supports_resize_observer: bool = True):
        self.supports_resize_observer = supports_resize_observer
        self._containers: Dict[str, Container] = {}
        self._window_listeners: List[Callable[[], None]] = []

    def mount(self, container: Container) -> Container:
        self._containers[container.selector] = container
        return container

    def unmount(self, selector: str) -> None:
        container = self._containers.pop(selector, None)
        if container is not None:
            container.detach()

    def query(self, selector: str) -> Optional[Container]:
        return self._containers.get(selector)

    def add_window_resize_listener(self, listener: Callable[[], None]) -> None:
        self._window_listeners.append(listener)

    def remove_window_resize_listener(self, listener: Callable[[], None]) -> None:
        if listener in self._window_listeners:
            self._window_listeners.remove(listener)

    @property
    def window_listener_count(self) -> int:
        return len(self._window_listeners)

    def resize_window(self) -> None:
        for listener in list(self._window_listeners):
            listener()

    def observe_size(self, container: Container, callback: SizeCallback) -> Callable[[], None]:
        """
        Call `callback` whenever the container's pixel size may have changed.
        Returns the function that removes the subscription.
        """
        if self.supports_resize_observer:
            container.add_resize_observer(callback)
            return lambda: container.remove_resize_observer(callback)

        # Window-level signal carries no size; the render reads bounds itself
        def handler():
            callback(None)

        self.add_window_resize_listener(handler)
        return lambda: self.remove_window_resize_listener(handler)


# ==========================================
# SVG RENDER TARGET
# ==========================================
def _svg_attrs(shape: Shape) -> dict:
    attrs = dict(shape.style)
    if shape.role:
        attrs["role"] = shape.role
    return attrs


def render_svg(shapes: Sequence[Shape], width: float, height: float) -> str:
    # debug=False: aria-label / role are not in the SVG 1.1 attribute tables
    dwg = svgwrite.Drawing(size=("100%", "100%"), viewBox=f"0 0 {width} {height}", debug=False)

    for shape in shapes:
        attrs = _svg_attrs(shape)
        if isinstance(shape, Rect):
            element = dwg.rect(insert=(shape.x, shape.y), size=(max(0.0, shape.width), max(0.0, shape.height)),
                               **attrs)
        elif isinstance(shape, Line):
            element = dwg.line(start=(shape.x1, shape.y1), end=(shape.x2, shape.y2), **attrs)
        elif isinstance(shape, Circle):
            element = dwg.circle(center=(shape.cx, shape.cy), r=shape.r, **attrs)
        elif isinstance(shape, Path):
            element = dwg.path(d=shape.d, **attrs)
        elif isinstance(shape, Text):
            if shape.rotation:
                attrs["transform"] = f"rotate({shape.rotation}, {shape.x}, {shape.y})"
            element = dwg.text(shape.text, insert=(shape.x, shape.y), text_anchor=shape.anchor, **attrs)
        else:
            logger.warning(f"Skipping unknown shape {type(shape).__name__}")
            continue

        if shape.title:
            element.set_desc(title=shape.title)
        dwg.add(element)

    return dwg.tostring()
