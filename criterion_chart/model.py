"""Turns loader buckets into the renderer-agnostic grouped bar chart model."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from .errors import PaletteExhausted
from .loader import BenchRecord

# ── Color palette ─────────────────────────────────────────────────────────────
#
# Colors are handed out from the END of the palette: the alphabetically first
# variant gets the last entry, the second variant the one before it, and so
# on.  The same set of variant names therefore always yields the same colors.

DEFAULT_PALETTE: tuple[str, ...] = (
    "#37123C",  # aubergine
    "#71677C",  # slate
    "#A99F96",  # stone
    "#DDA77B",  # sand
)

# ── Size labels ───────────────────────────────────────────────────────────────
#
# Human-readable names of the well-known compression corpus inputs.  Any other
# size is labelled with its decimal byte count.

SIZE_LABELS: dict[int, str] = {
    725:     "725b Text",
    34308:   "34K Text",
    64723:   "65K Text",
    66675:   "66K JSON",
    9991663: "10Mb Dickens",
}


@dataclass(frozen=True)
class Group:
    label: str
    bars: tuple[tuple[float, str], ...]   # (value, color), left to right


@dataclass
class ChartModel:
    groups: list[Group] = field(default_factory=list)
    variant_colors: dict[str, str] = field(default_factory=dict)


def size_label(num_bytes: int, labels: Mapping[int, str] = SIZE_LABELS) -> str:
    return labels.get(num_bytes, str(num_bytes))


def assign_colors(
    variants: Iterable[str],
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> dict[str, str]:
    """
    Map each distinct variant name to a palette color.

    Names are sorted; sorted name i receives palette[len(palette) - 1 - i].
    Raises PaletteExhausted instead of reusing colors.
    """
    names = sorted(set(variants))
    if len(names) > len(palette):
        raise PaletteExhausted(names, len(palette))

    last = len(palette) - 1
    return {name: palette[last - i] for i, name in enumerate(names)}


def build_chart_model(
    buckets: Mapping[str, Sequence[BenchRecord]],
    palette: Sequence[str] = DEFAULT_PALETTE,
) -> ChartModel:
    variant_colors = assign_colors(
        (r.variant for records in buckets.values() for r in records),
        palette,
    )

    groups: list[Group] = []
    for key in sorted(buckets):
        records = buckets[key]
        if not records:
            continue
        groups.append(Group(
            label=size_label(records[0].num_bytes),
            bars=tuple((r.throughput, variant_colors[r.variant]) for r in records),
        ))

    return ChartModel(groups=groups, variant_colors=variant_colors)
