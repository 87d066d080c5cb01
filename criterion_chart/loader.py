"""
Reads the line-delimited JSON message stream of a Criterion-style benchmark
run and buckets the completed benchmarks by (benchmark name, input size).

Only ``benchmark-complete`` messages are used; every other message kind is
skipped.  A processed message looks like:

  {"reason": "benchmark-complete",
   "id": "compress/lz4_flex/725",            bench / variant / num_bytes
   "typical": {"estimate": 1234.5, ...},     nanoseconds
   ...}

Any malformed ``benchmark-complete`` line aborts the whole load.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import MalformedRecord

COMPLETE_REASON = "benchmark-complete"

_SIZE_RE = re.compile(r"[0-9]+")

# sizes are 32-bit unsigned byte counts
MAX_NUM_BYTES = 2**32 - 1


@dataclass(frozen=True)
class BenchRecord:
    bench_name: str
    variant: str
    num_bytes: int
    throughput: float   # bytes / ns, i.e. GB/s

    @property
    def group_key(self) -> str:
        return group_key(self.bench_name, self.num_bytes)


def group_key(bench_name: str, num_bytes: int) -> str:
    return f"{bench_name}/{num_bytes}"


# ── Line parser ───────────────────────────────────────────────────────────────

def _parse_id(raw_id: object, lineno: int) -> tuple[str, str, int]:
    if not isinstance(raw_id, str):
        raise MalformedRecord(lineno, "id", "missing or not a string")

    components = raw_id.split("/")
    if len(components) < 3:
        raise MalformedRecord(
            lineno, "id", f"{raw_id!r} is not bench/variant/num_bytes"
        )
    bench_name, variant, raw_size = components[0], components[1], components[2]

    if not _SIZE_RE.fullmatch(raw_size):
        raise MalformedRecord(
            lineno, "id", f"size {raw_size!r} is not an unsigned integer"
        )
    # length check first: int() refuses very long digit strings
    if len(raw_size) > len(str(MAX_NUM_BYTES)) or int(raw_size) > MAX_NUM_BYTES:
        raise MalformedRecord(
            lineno, "id", f"size {raw_size[:20]!r} exceeds {MAX_NUM_BYTES}"
        )
    num_bytes = int(raw_size)
    if num_bytes == 0:
        raise MalformedRecord(lineno, "id", "size must be greater than zero")

    return bench_name, variant, num_bytes


def _parse_estimate(typical: object, lineno: int) -> float:
    if not isinstance(typical, dict):
        raise MalformedRecord(lineno, "typical", "missing or not an object")

    estimate = typical.get("estimate")
    if isinstance(estimate, bool) or not isinstance(estimate, (int, float)):
        raise MalformedRecord(
            lineno, "typical.estimate", "missing or not a number"
        )
    try:
        duration_ns = float(estimate)
    except OverflowError as error:
        raise MalformedRecord(
            lineno, "typical.estimate", "too large for a duration"
        ) from error
    if not math.isfinite(duration_ns) or duration_ns <= 0:
        raise MalformedRecord(
            lineno, "typical.estimate", f"{estimate!r} is not a positive duration"
        )
    return duration_ns


def parse_record(line: str, lineno: int) -> BenchRecord | None:
    """
    Parse one line of the message stream.

    Returns None for blank lines and for messages whose ``reason`` is not
    ``benchmark-complete``; raises MalformedRecord for anything else that
    cannot be turned into a BenchRecord.
    """
    line = line.strip()
    if not line:
        return None

    try:
        message = json.loads(line)
    except ValueError as error:
        # JSONDecodeError, or an integer literal past the int() digit limit
        raise MalformedRecord(lineno, "line", f"invalid JSON ({error})") from error

    if not isinstance(message, dict):
        raise MalformedRecord(lineno, "line", "not a JSON object")
    if message.get("reason") != COMPLETE_REASON:
        return None

    bench_name, variant, num_bytes = _parse_id(message.get("id"), lineno)
    duration_ns = _parse_estimate(message.get("typical"), lineno)

    try:
        throughput = num_bytes / duration_ns
    except OverflowError:
        throughput = math.inf
    if not math.isfinite(throughput):
        raise MalformedRecord(
            lineno, "typical.estimate", f"{duration_ns!r} ns gives an infinite throughput"
        )

    return BenchRecord(
        bench_name=bench_name,
        variant=variant,
        num_bytes=num_bytes,
        throughput=throughput,
    )


# ── Aggregation ───────────────────────────────────────────────────────────────

def load_groups(
    lines: Iterable[str | bytes],
    exclude_sizes: Collection[int] = (),
) -> dict[str, list[BenchRecord]]:
    """
    Bucket every completed benchmark by ``"{bench_name}/{num_bytes}"``.

    Records keep their input order inside a bucket.  Sizes listed in
    exclude_sizes are dropped after validation.  Byte lines are decoded as
    UTF-8 one at a time so a bad byte is reported with its line number.
    """
    groups: dict[str, list[BenchRecord]] = {}
    for lineno, line in enumerate(lines, start=1):
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as error:
                raise MalformedRecord(lineno, "line", "invalid UTF-8") from error
        record = parse_record(line, lineno)
        if record is None or record.num_bytes in exclude_sizes:
            continue
        groups.setdefault(record.group_key, []).append(record)
    return groups


def load_groups_from_path(
    path: Path,
    exclude_sizes: Collection[int] = (),
) -> dict[str, list[BenchRecord]]:
    with open(path, "rb") as f:
        return load_groups(f, exclude_sizes)
