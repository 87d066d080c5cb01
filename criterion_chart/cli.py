"""
Render a grouped bar chart from a Criterion message stream.

Usage:
    cargo criterion --message-format=json > data.json
    criterion-chart -i data.json -o image.svg -t "lz4 compression"
    criterion-chart -i data.json -o image.png --no-delta -x 9991663
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .drawing import save_drawing
from .errors import ChartError
from .layout import GroupBarOptions, render_grouped_bar_chart
from .loader import BenchRecord, load_groups_from_path
from .model import DEFAULT_PALETTE, build_chart_model


def _palette(text: str) -> tuple[str, ...]:
    colors = tuple(c.strip() for c in text.split(",") if c.strip())
    if not colors:
        raise argparse.ArgumentTypeError("palette needs at least one color")
    return colors


def build_parser() -> argparse.ArgumentParser:
    defaults = GroupBarOptions()
    parser = argparse.ArgumentParser(
        prog="criterion-chart",
        description="Grouped bar chart of benchmark throughput per input size.",
    )
    parser.add_argument("-i", "--input", type=Path, required=True,
                        help="Line-delimited JSON benchmark messages.")
    parser.add_argument("-o", "--output", type=Path, required=True,
                        help="Image to write; format follows the suffix (.svg, .png, ...).")
    parser.add_argument("-t", "--title", default="", help="Chart title.")
    parser.add_argument("--delta", action=argparse.BooleanOptionalAction,
                        default=defaults.show_delta,
                        help="Annotate each group with the max/min percent difference.")
    parser.add_argument("-x", "--exclude-size", type=int, action="append",
                        default=[], metavar="NUM_BYTES",
                        help="Drop measurements of this input size (repeatable).")
    parser.add_argument("--width", type=float, default=defaults.total_width)
    parser.add_argument("--height", type=float, default=defaults.total_height)
    parser.add_argument("--bar-width-cap", type=float, default=defaults.bar_width_cap)
    parser.add_argument("--label-anchor", choices=("middle", "start"),
                        default=defaults.label_anchor)
    parser.add_argument("--unit-label", default=defaults.unit_label,
                        help="Y axis caption.")
    parser.add_argument("--palette", type=_palette, default=DEFAULT_PALETTE,
                        help="Comma-separated colors, handed out from the end.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print the aggregated groups to stderr.")
    return parser


def _dump_groups(groups: dict[str, list[BenchRecord]]) -> None:
    for key in sorted(groups):
        print(f"{key}:", file=sys.stderr)
        for r in groups[key]:
            print(f"    {r.variant:<24} {r.throughput:10.4f} GB/s", file=sys.stderr)


def run(args: argparse.Namespace) -> Path:
    groups = load_groups_from_path(args.input, set(args.exclude_size))
    if args.verbose:
        _dump_groups(groups)

    model = build_chart_model(groups, args.palette)
    options = GroupBarOptions(
        total_width=args.width,
        total_height=args.height,
        show_delta=args.delta,
        bar_width_cap=args.bar_width_cap,
        label_anchor=args.label_anchor,
        unit_label=args.unit_label,
    )
    drawing = render_grouped_bar_chart(args.title, model.groups,
                                       model.variant_colors, options)
    return save_drawing(drawing, args.output)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        path = run(args)
    except (ChartError, OSError) as error:
        sys.exit(f"error: {error}")
    print(f"✓  Chart → {path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
