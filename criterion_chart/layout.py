"""
Grouped bar chart layout.

Everything here is plain geometry: given the chart model and a
GroupBarOptions, compute where every bar, axis, tick, label, legend entry and
the title go, and append them to a Drawing.  Coordinates follow SVG
conventions (y grows downward); the plot baseline sits at
``available_graph_height + border_padding``.

Layout of the canvas (not to scale):

  ┌─────────────────────────────────────────────── total_width ──┐
  │ title band (OFFSET_Y, above y = 0)                           │
  ├──────────┬───────────────────────────────────────────────────┤
  │ y axis   │  plot area  available_graph_width                 │
  │ labels   │             x available_graph_height    [legend]  │
  │ Y_AXIS_  │                                                   │
  │ SPACE    ├───────────────────────────────────────────────────┤
  │          │  group labels / X_AXIS_SPACE                      │
  └──────────┴───────────────────────────────────────────────────┘
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .drawing import Drawing, Line, Rect, Text
from .errors import DegenerateLayout, EmptyInput, NoData
from .model import Group

# ── Reserved space & fixed offsets ────────────────────────────────────────────

Y_AXIS_SPACE = 80.0         # left of the plot: tick labels + axis caption
X_AXIS_SPACE = 80.0         # below the plot: group labels
OFFSET_Y     = 50.0         # whole chart is shifted down by this much

NUM_TICKS          = 8
TICK_LENGTH        = 5.0
AXIS_GAP           = 5.0    # y axis sits this far left of the first group
GROUP_LABEL_OFFSET = 20.0
DELTA_LABEL_OFFSET = 10.0
TITLE_OFFSET_X     = 70.0

AXIS_COLOR   = "#000000"
GRID_COLOR   = "#999999"
SMALL_FONT   = 12.0

# ── Legend metrics ────────────────────────────────────────────────────────────

LEGEND_PADDING    = 10.0
LEGEND_ROW_HEIGHT = 20.0
LEGEND_CHAR_WIDTH = 7.0     # rough advance of a 12px glyph
LEGEND_SWATCH_W   = 20.0
LEGEND_SWATCH_GAP = 10.0
LEGEND_MARGIN     = 10.0    # distance from the plot area's top-right corner
LEGEND_FILL       = "#FFFFFF"
LEGEND_STROKE     = "#121212"


@dataclass(frozen=True)
class GroupBarOptions:
    total_width: float = 800.0
    total_height: float = 600.0
    # chart padding from border
    border_padding: float = 10.0
    # reserved spacing between groups; carried for callers, the geometry
    # leaves gaps through bar_width_cap instead
    group_padding: float = 20.0
    # padding between bars inside group
    bar_padding: float = 3.0
    show_delta: bool = True
    # upper bound on a single bar's width
    bar_width_cap: float = 30.0
    # "middle" centers group labels under the bars, "start" left-aligns them
    label_anchor: str = "middle"
    unit_label: str = "GB/s"

    def __post_init__(self) -> None:
        if self.label_anchor not in ("middle", "start"):
            raise ValueError(f"label_anchor must be 'middle' or 'start', "
                             f"not {self.label_anchor!r}")

    @property
    def available_graph_width(self) -> float:
        return self.total_width - Y_AXIS_SPACE - self.border_padding * 2

    @property
    def available_graph_height(self) -> float:
        return self.total_height - X_AXIS_SPACE - self.border_padding * 2

    @property
    def baseline_y(self) -> float:
        return self.available_graph_height + self.border_padding

    @property
    def plot_left(self) -> float:
        return Y_AXIS_SPACE + self.border_padding


# ── Scale helpers ─────────────────────────────────────────────────────────────

def _round_half_away(value: float) -> float:
    if value >= 0:
        return math.floor(value + 0.5)
    return math.ceil(value - 0.5)


def calc_step_size(max_value: float, target_steps: float) -> float:
    """
    Return a human-friendly tick increment (1, 2, 5 or 10 × 10^k) close to
    max_value / target_steps.
    """
    if not max_value > 0 or not math.isfinite(max_value):
        raise ValueError(f"max_value must be positive and finite, not {max_value!r}")

    temp_step = max_value / target_steps
    mag = math.floor(math.log10(temp_step))
    mag_pow = 10.0 ** mag

    # most significant digit, biased upward
    mag_msd = _round_half_away(temp_step / mag_pow + 0.5)

    if mag_msd > 5:
        mag_msd = 10
    elif mag_msd > 2:
        mag_msd = 5
    elif mag_msd > 1:
        mag_msd = 2
    else:
        mag_msd = 1

    return mag_msd * mag_pow


def axis_ticks(max_value: float, num_ticks: int = NUM_TICKS) -> list[float]:
    step = calc_step_size(max_value, num_ticks)
    return [i * step for i in range(num_ticks)]


def format_tick(value: float, step: float) -> str:
    decimals = max(0, -math.floor(math.log10(step)))
    return f"{value:.{decimals}f}"


def percent_difference(min_value: float, max_value: float) -> str:
    if min_value == max_value:
        return "+0.00%"
    if min_value == 0:
        return "+inf%"
    return f"+{(max_value - min_value) / min_value * 100:.2f}%"


def compute_bar_height(options: GroupBarOptions, value: float, max_value: float) -> float:
    return options.available_graph_height * (value / max_value)


def compute_y_for_value(options: GroupBarOptions, value: float, max_value: float) -> float:
    return options.baseline_y - compute_bar_height(options, value, max_value)


# ── Chart parts ───────────────────────────────────────────────────────────────

def draw_group(
    drawing: Drawing,
    options: GroupBarOptions,
    group: Group,
    group_start_x: float,
    bar_width: float,
    max_value: float,
) -> Drawing:
    bar_x = group_start_x
    for value, color in group.bars:
        drawing.add(Rect(
            x=bar_x,
            y=compute_y_for_value(options, value, max_value),
            width=bar_width,
            height=compute_bar_height(options, value, max_value),
            fill=color,
        ))
        bar_x += bar_width + options.bar_padding

    n = len(group.bars)
    bars_center_x = group_start_x + (n * bar_width + (n - 1) * options.bar_padding) / 2

    if options.label_anchor == "start":
        drawing.add(Text(group_start_x, options.baseline_y + GROUP_LABEL_OFFSET,
                         group.label, anchor="start"))
    else:
        drawing.add(Text(bars_center_x, options.baseline_y + GROUP_LABEL_OFFSET,
                         group.label, anchor="middle"))

    if options.show_delta:
        values = [value for value, _ in group.bars]
        low, high = min(values), max(values)
        y = compute_y_for_value(options, high, max_value)
        drawing.add(Text(bars_center_x, y - DELTA_LABEL_OFFSET,
                         percent_difference(low, high), anchor="middle"))

    return drawing


def draw_y_scale(
    drawing: Drawing,
    options: GroupBarOptions,
    group_start_x: float,
    max_value: float,
) -> Drawing:
    axis_x = group_start_x - AXIS_GAP
    plot_right = group_start_x + options.available_graph_width
    step = calc_step_size(max_value, NUM_TICKS)

    for value in axis_ticks(max_value, NUM_TICKS):
        y = compute_y_for_value(options, value, max_value)
        drawing.add(
            Line(axis_x, y, axis_x - TICK_LENGTH, y, stroke=AXIS_COLOR),
            Line(axis_x - TICK_LENGTH, y, plot_right, y, stroke=GRID_COLOR),
            Text(axis_x - 2 * TICK_LENGTH, y + 4, format_tick(value, step),
                 anchor="end", font_size=SMALL_FONT),
        )

    mid_y = (options.border_padding + options.available_graph_height) / 2
    drawing.add(
        Text(30, mid_y, options.unit_label, anchor="middle"),
        Line(axis_x, options.border_padding, axis_x, options.baseline_y,
             stroke=AXIS_COLOR),
    )
    return drawing


def draw_x_scale(drawing: Drawing, options: GroupBarOptions, group_start_x: float) -> Drawing:
    return drawing.add(Line(
        group_start_x - AXIS_GAP, options.baseline_y,
        group_start_x + options.available_graph_width, options.baseline_y,
        stroke=AXIS_COLOR,
    ))


def legend_size(variant_colors: Mapping[str, str]) -> tuple[float, float]:
    longest = max((len(name) for name in variant_colors), default=0)
    width = (LEGEND_PADDING + longest * LEGEND_CHAR_WIDTH
             + LEGEND_SWATCH_GAP + LEGEND_SWATCH_W + LEGEND_PADDING)
    height = LEGEND_PADDING * 2 + len(variant_colors) * LEGEND_ROW_HEIGHT
    return width, height


def draw_legend(
    drawing: Drawing,
    options: GroupBarOptions,
    variant_colors: Mapping[str, str],
) -> Drawing:
    width, height = legend_size(variant_colors)
    left = options.plot_left + options.available_graph_width - width - LEGEND_MARGIN
    top = options.border_padding + LEGEND_MARGIN

    drawing.add(Rect(left, top, width, height, fill=LEGEND_FILL, stroke=LEGEND_STROKE))

    row_y = top + LEGEND_PADDING + 5
    for name in sorted(variant_colors):
        drawing.add(
            Text(left + LEGEND_PADDING, row_y + 10, name, font_size=SMALL_FONT),
            Rect(left + width - LEGEND_PADDING - LEGEND_SWATCH_W, row_y,
                 LEGEND_SWATCH_W, LEGEND_ROW_HEIGHT - 10, fill=variant_colors[name]),
        )
        row_y += LEGEND_ROW_HEIGHT
    return drawing


def draw_title(drawing: Drawing, options: GroupBarOptions, title: str) -> Drawing:
    # fixed anchor; there is no text measurement to center on the title itself
    x = options.border_padding + options.available_graph_width - TITLE_OFFSET_X
    return drawing.add(Text(x, 0, title, anchor="middle", bold=True))


# ── Entry point ───────────────────────────────────────────────────────────────

def render_grouped_bar_chart(
    title: str,
    groups: Sequence[Group],
    variant_colors: Mapping[str, str],
    options: GroupBarOptions | None = None,
) -> Drawing:
    """
    Lay out the whole chart.

    Raises DegenerateLayout, EmptyInput or NoData before anything is drawn.
    """
    if options is None:
        options = GroupBarOptions()

    if options.available_graph_width <= 0 or options.available_graph_height <= 0:
        raise DegenerateLayout(options.available_graph_width,
                               options.available_graph_height)
    if not groups:
        raise EmptyInput("no benchmark groups to draw")

    values = [value for g in groups for value, _ in g.bars]
    if not values:
        raise NoData("benchmark groups contain no bars")
    max_value = max(values)
    if not max_value > 0 or not math.isfinite(max_value):
        raise NoData(f"largest bar value is {max_value!r}; nothing to scale against")

    group_width = options.available_graph_width / len(groups)
    max_bars = max(len(g.bars) for g in groups)
    bar_width = min(group_width / max_bars, options.bar_width_cap)

    drawing = Drawing(
        width=options.total_width,
        height=options.total_height + OFFSET_Y,
        offset_y=OFFSET_Y,
    )

    curr_group_x = options.plot_left
    drawing = draw_y_scale(drawing, options, curr_group_x, max_value)
    drawing = draw_x_scale(drawing, options, curr_group_x)

    for group in groups:
        if group.bars:
            drawing = draw_group(drawing, options, group, curr_group_x,
                                 bar_width, max_value)
        curr_group_x += group_width

    drawing = draw_legend(drawing, options, variant_colors)
    drawing = draw_title(drawing, options, title)
    return drawing
