"""
Draw instructions emitted by the charts.

A render pass produces a flat list of these descriptors in paint order; the
surface layer turns them into SVG. Charts never touch a drawing API directly.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Shape:
    # SVG presentation attributes, underscores in place of dashes
    style: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    title: Optional[str] = None
    role: Optional[str] = None


@dataclass(frozen=True)
class Rect(Shape):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Line(Shape):
    x1: float = 0.0
    y1: float = 0.0
    x2: float = 0.0
    y2: float = 0.0


@dataclass(frozen=True)
class Circle(Shape):
    cx: float = 0.0
    cy: float = 0.0
    r: float = 1.0


@dataclass(frozen=True)
class Path(Shape):
    d: str = ""


@dataclass(frozen=True)
class Text(Shape):
    x: float = 0.0
    y: float = 0.0
    text: str = ""
    anchor: str = "start"
    rotation: float = 0.0


def path_through(points: List[Tuple[float, float]]) -> str:
    """Straight-segment path data through the given pixel points."""
    if not points:
        return ""
    path_d = ["M", f"{points[0][0]:.2f},{points[0][1]:.2f}"]
    for px, py in points[1:]:
        path_d.append(f"L {px:.2f},{py:.2f}")
    return " ".join(path_d)


def translate(shapes: List[Shape], dx: float, dy: float) -> List[Shape]:
    """Offset a list of shapes, e.g. from plot-area to container coordinates."""
    moved = []
    for s in shapes:
        if isinstance(s, Rect):
            moved.append(replace(s, x=s.x + dx, y=s.y + dy))
        elif isinstance(s, Line):
            moved.append(replace(s, x1=s.x1 + dx, y1=s.y1 + dy, x2=s.x2 + dx, y2=s.y2 + dy))
        elif isinstance(s, Circle):
            moved.append(replace(s, cx=s.cx + dx, cy=s.cy + dy))
        elif isinstance(s, Text):
            moved.append(replace(s, x=s.x + dx, y=s.y + dy))
        elif isinstance(s, Path):
            offset = f"translate({dx},{dy}) " + s.style.get("transform", "")
            moved.append(replace(s, style={**s.style, "transform": offset.strip()}))
        else:
            moved.append(s)
    return moved
