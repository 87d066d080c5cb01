"""Grouped bar charts of Criterion benchmark throughput."""

from .drawing import Drawing, Line, Rect, Text, save_drawing
from .errors import (
    ChartError,
    DegenerateLayout,
    EmptyInput,
    MalformedRecord,
    NoData,
    PaletteExhausted,
    UnsupportedFormat,
)
from .layout import GroupBarOptions, calc_step_size, render_grouped_bar_chart
from .loader import BenchRecord, load_groups, load_groups_from_path
from .model import ChartModel, Group, assign_colors, build_chart_model

__version__ = "0.1.0"
