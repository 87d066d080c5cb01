import json

import pytest


def complete(bench_id, estimate, **extra):
    message = {
        "reason": "benchmark-complete",
        "id": bench_id,
        "typical": {"estimate": estimate, "lower_bound": estimate, "upper_bound": estimate,
                    "unit": "ns"},
    }
    message.update(extra)
    return json.dumps(message)


@pytest.fixture
def copy_lines():
    return [
        complete("copy/fast/1024", 1000.0),
        complete("copy/slow/1024", 2000.0),
    ]


@pytest.fixture
def stream_file(tmp_path, copy_lines):
    lines = [
        json.dumps({"reason": "group-complete", "group_name": "copy"}),
        *copy_lines,
        json.dumps({"reason": "benchmark-complete", "id": "copy/fast/725",
                    "typical": {"estimate": 500.0}}),
        "",
    ]
    path = tmp_path / "data.json"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def of_type(drawing, kind):
    return [p for p in drawing.primitives if isinstance(p, kind)]
