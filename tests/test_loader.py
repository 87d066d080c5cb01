import json

import pytest

from conftest import complete
from criterion_chart.errors import MalformedRecord
from criterion_chart.loader import (
    BenchRecord,
    load_groups,
    load_groups_from_path,
    parse_record,
)


def test_round_trip_groups_and_throughput(copy_lines):
    groups = load_groups(copy_lines)

    assert list(groups) == ["copy/1024"]
    fast, slow = groups["copy/1024"]
    assert (fast.variant, slow.variant) == ("fast", "slow")
    assert fast.throughput == pytest.approx(1.024)
    assert slow.throughput == pytest.approx(0.512)


def test_parse_record_fields():
    record = parse_record(complete("compress/lz4_flex/725", 250.0), 1)
    assert record == BenchRecord(
        bench_name="compress", variant="lz4_flex", num_bytes=725, throughput=2.9,
    )
    assert record.group_key == "compress/725"


def test_other_reasons_and_blank_lines_are_skipped(copy_lines):
    lines = [
        json.dumps({"reason": "benchmark-start", "id": "copy/fast/1024"}),
        "",
        "   ",
        json.dumps({"id": "copy/fast/1024"}),
        *copy_lines,
        json.dumps({"reason": "suite-complete"}),
    ]
    groups = load_groups(lines)
    assert [r.variant for r in groups["copy/1024"]] == ["fast", "slow"]


def test_every_record_lands_in_its_own_key_in_input_order():
    lines = [
        complete("copy/b/10", 1.0),
        complete("copy/a/20", 1.0),
        complete("zip/a/10", 1.0),
        complete("copy/a/10", 1.0),
        complete("copy/c/10", 1.0),
    ]
    groups = load_groups(lines)

    assert set(groups) == {"copy/10", "copy/20", "zip/10"}
    assert [r.variant for r in groups["copy/10"]] == ["b", "a", "c"]
    assert sum(len(records) for records in groups.values()) == len(lines)
    for key, records in groups.items():
        assert all(r.group_key == key for r in records)


def test_extra_id_components_are_ignored():
    record = parse_record(complete("copy/fast/64/extra", 64.0), 1)
    assert (record.bench_name, record.variant, record.num_bytes) == ("copy", "fast", 64)


def test_exclusion_filter_drops_matching_sizes(copy_lines):
    lines = [*copy_lines, complete("copy/fast/9991663", 1e6)]
    groups = load_groups(lines, exclude_sizes={9991663})

    assert list(groups) == ["copy/1024"]
    assert all(r.num_bytes != 9991663 for rs in groups.values() for r in rs)


def test_excluded_records_are_still_validated():
    with pytest.raises(MalformedRecord):
        load_groups([complete("copy/fast/77", "slow")], exclude_sizes={77})


@pytest.mark.parametrize(
    "line, field",
    [
        ("{not json", "line"),
        ("[1, 2, 3]", "line"),
        (json.dumps({"reason": "benchmark-complete"}), "id"),
        (json.dumps({"reason": "benchmark-complete", "id": 17}), "id"),
        (complete("copy/1024", 1.0), "id"),
        (complete("copy/fast/abc", 1.0), "id"),
        (complete("copy/fast/-5", 1.0), "id"),
        (complete("copy/fast/0", 1.0), "id"),
        (json.dumps({"reason": "benchmark-complete", "id": "copy/fast/1"}), "typical"),
        (complete("copy/fast/1", "1.0"), "typical.estimate"),
        (complete("copy/fast/1", True), "typical.estimate"),
        (complete("copy/fast/1", 0.0), "typical.estimate"),
        (complete("copy/fast/1", -3.0), "typical.estimate"),
        (complete("copy/fast/" + "9" * 400, 1.0), "id"),
        (complete("copy/fast/4294967296", 1.0), "id"),
        (complete("copy/fast/1", 10 ** 400), "typical.estimate"),
        (complete("copy/fast/4294967295", 5e-324), "typical.estimate"),
    ],
)
def test_malformed_records(line, field):
    with pytest.raises(MalformedRecord) as excinfo:
        parse_record(line, 7)
    assert excinfo.value.field == field
    assert excinfo.value.lineno == 7
    assert "line 7" in str(excinfo.value)


def test_malformed_line_aborts_whole_load(copy_lines):
    lines = [*copy_lines, complete("copy/fast/oops", 1.0), complete("copy/x/1", 1.0)]
    with pytest.raises(MalformedRecord) as excinfo:
        load_groups(lines)
    assert excinfo.value.lineno == 3


def test_load_from_path(stream_file):
    groups = load_groups_from_path(stream_file)
    assert list(groups) == ["copy/1024", "copy/725"]


def test_missing_file_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        load_groups_from_path(tmp_path / "missing.json")


def test_largest_size_is_accepted():
    record = parse_record(complete("copy/fast/4294967295", 4294967295), 1)
    assert record.num_bytes == 2**32 - 1
    assert record.throughput == pytest.approx(1.0)


def test_byte_lines_are_decoded(copy_lines):
    groups = load_groups([line.encode("utf-8") + b"\n" for line in copy_lines])
    assert [r.variant for r in groups["copy/1024"]] == ["fast", "slow"]


def test_invalid_utf8_reports_line_number(copy_lines):
    lines = [copy_lines[0].encode("utf-8"), b'{"reason": "\xff"}\n']
    with pytest.raises(MalformedRecord) as excinfo:
        load_groups(lines)
    assert (excinfo.value.lineno, excinfo.value.field) == (2, "line")
