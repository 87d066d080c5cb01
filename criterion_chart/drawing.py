"""
Drawing primitives and their matplotlib serializer.

The chart layout is expressed as a flat command list of rectangles, lines
and text in SVG conventions: origin top-left, y grows downward, sizes in
pixels, text anchored at ``start`` / ``middle`` / ``end``.  save_drawing()
replays that list onto a matplotlib figure whose data coordinates are the
pixel grid, so the saved image matches the computed geometry exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import matplotlib
matplotlib.use("Agg")          # non-interactive, no display required
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.patches import Rectangle

from .errors import UnsupportedFormat

# 1 pt == 1 px, so font sizes and line widths read as SVG pixels.
DPI = 72

DEFAULT_FONT_SIZE = 16.0      # SVG user-agent default
DEFAULT_FONT_FAMILY = "sans-serif"

_ANCHOR_TO_HA: dict[str, str] = {
    "start":  "left",
    "middle": "center",
    "end":    "right",
}


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: str | None = None


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "#000000"


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    anchor: str = "start"
    font_size: float = DEFAULT_FONT_SIZE
    bold: bool = False


Primitive = Union[Rect, Line, Text]


@dataclass
class Drawing:
    """
    Ordered list of primitives plus the canvas they are placed on.

    offset_y is added to every primitive's y coordinate at serialization
    time; the layout draws the plot area from y = 0 and leaves the band
    above it to the title.
    """

    width: float
    height: float
    offset_y: float = 0.0
    font_family: str = DEFAULT_FONT_FAMILY
    primitives: list[Primitive] = field(default_factory=list)

    def add(self, *primitives: Primitive) -> Drawing:
        self.primitives.extend(primitives)
        return self


# ── Serializer ────────────────────────────────────────────────────────────────

def _apply_style(font_family: str) -> None:
    plt.rcParams.update({
        "figure.facecolor": "white",
        "axes.facecolor":   "white",
        "font.family":      font_family,
        "svg.fonttype":     "none",     # keep labels as <text>, not paths
        "lines.linewidth":  1.0,
        "patch.linewidth":  1.0,
    })


def _replay(ax, drawing: Drawing) -> None:
    dy = drawing.offset_y
    for z, prim in enumerate(drawing.primitives):
        # later primitives paint over earlier ones, as in SVG document order
        if isinstance(prim, Rect):
            ax.add_patch(Rectangle(
                (prim.x, prim.y + dy), prim.width, prim.height,
                facecolor=prim.fill,
                edgecolor=prim.stroke if prim.stroke else "none",
                zorder=z,
            ))
        elif isinstance(prim, Line):
            ax.add_line(Line2D(
                [prim.x1, prim.x2], [prim.y1 + dy, prim.y2 + dy],
                color=prim.stroke, zorder=z,
            ))
        elif isinstance(prim, Text):
            ax.text(
                prim.x, prim.y + dy, prim.text,
                ha=_ANCHOR_TO_HA[prim.anchor], va="baseline",
                fontsize=prim.font_size,
                fontweight="bold" if prim.bold else "normal",
                parse_math=False,
                clip_on=True,
                zorder=z,
            )
        else:
            raise TypeError(f"unknown drawing primitive {prim!r}")


def save_drawing(drawing: Drawing, path: Path) -> Path:
    """
    Render the drawing and write it to path.

    The image format follows the file suffix (.svg, .png, .pdf, ...); an
    unknown suffix raises UnsupportedFormat before anything is drawn.
    Primitives outside the canvas are clipped.
    """
    _apply_style(drawing.font_family)
    fig = plt.figure(figsize=(drawing.width / DPI, drawing.height / DPI), dpi=DPI)
    try:
        suffix = Path(path).suffix.lower().lstrip(".")
        supported = fig.canvas.get_supported_filetypes()
        if suffix and suffix not in supported:
            raise UnsupportedFormat(path, sorted(supported))

        ax = fig.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, drawing.width)
        ax.set_ylim(drawing.height, 0)
        ax.axis("off")
        _replay(ax, drawing)
        fig.savefig(path, dpi=DPI)
    finally:
        plt.close(fig)
    return path
