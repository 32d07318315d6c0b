from __future__ import annotations

import json
from pathlib import Path

import pytest

from lib.ops_file import Operation, OpsFileError, load_ops, parse_ops_records, parse_ops_text
from updatable_heap.indexed_heap import UpdatableHeap


def test_parse_ops_text_literals_and_comments() -> None:
    ops = parse_ops_text(
        "# warm up\n"
        "insert A 5\n"
        "insert 7 2.5   # key stays a string\n"
        "\n"
        "erase A\n"
        "pop\n"
        "stable_top\n"
    )
    assert [op.name for op in ops] == ["insert", "insert", "erase", "pop", "stable_top"]
    assert ops[0] == Operation("insert", key="A", priority=5, source="line 2")
    assert ops[1].key == "7"
    assert ops[1].priority == 2.5
    assert ops[2].source == "line 5"


@pytest.mark.parametrize(
    "text, message",
    [
        ("frobnicate A", "unknown operation"),
        ("insert A", "needs priority"),
        ("pop now", "too many arguments"),
    ],
)
def test_parse_ops_text_errors(text: str, message: str) -> None:
    with pytest.raises(OpsFileError, match=message):
        parse_ops_text(text)


def test_parse_ops_records() -> None:
    ops = parse_ops_records(
        [{"op": "insert", "key": "x", "priority": 1}, {"op": "stable_remove"}]
    )
    assert ops[0].key == "x"
    assert ops[1].name == "stable_remove"

    with pytest.raises(OpsFileError, match="entry 0"):
        parse_ops_records([{"op": "erase"}])
    with pytest.raises(OpsFileError, match="takes no priority"):
        parse_ops_records([{"op": "erase", "key": "x", "priority": 3}])
    with pytest.raises(OpsFileError):
        parse_ops_records({"op": "pop"})


def test_load_ops_by_suffix(tmp_path: Path) -> None:
    records = [{"op": "insert", "key": "k", "priority": 3}, {"op": "top"}]

    json_path = tmp_path / "ops.json"
    json_path.write_text(json.dumps(records))
    yaml_path = tmp_path / "ops.yaml"
    yaml_path.write_text("- {op: insert, key: k, priority: 3}\n- op: top\n")
    text_path = tmp_path / "ops.txt"
    text_path.write_text("insert k 3\ntop\n")

    loaded = [load_ops(p) for p in (json_path, yaml_path, text_path)]
    for ops in loaded:
        assert [(op.name, op.key, op.priority) for op in ops] == [
            ("insert", "k", 3),
            ("top", None, None),
        ]


def test_load_ops_missing_or_unsupported(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_ops(tmp_path / "none.txt")
    bad = tmp_path / "ops.csv"
    bad.write_text("pop\n")
    with pytest.raises(OpsFileError, match="Unsupported"):
        load_ops(bad)


def test_text_keys_do_not_collide_across_types() -> None:
    ops = parse_ops_text("insert true 3\ninsert 1 4\ninsert 1.0 5\n")
    assert [op.key for op in ops] == ["true", "1", "1.0"]

    heap = UpdatableHeap()
    for op in ops:
        heap.insert_or_update(op.key, op.priority)
    assert heap.size() == 3


@pytest.mark.parametrize("text", ["insert a NaN", "insert a Infinity", "insert a -Infinity"])
def test_non_finite_priority_rejected(text: str) -> None:
    with pytest.raises(OpsFileError, match="line 1: priority must be finite"):
        parse_ops_text(text)


@pytest.mark.parametrize(
    "record, message",
    [
        ({"op": ["pop"]}, "unknown operation"),
        ({"op": "insert", "key": [1, 2], "priority": 3}, "key must be"),
        ({"op": "erase", "key": {"a": 1}}, "key must be"),
        ({"op": "insert", "key": True, "priority": 3}, "key must be"),
        ({"op": "insert", "key": 1.5, "priority": 3}, "key must be"),
        ({"op": "insert", "key": "a", "priority": float("nan")}, "priority must be finite"),
    ],
)
def test_parse_ops_records_rejects_bad_values(record: dict, message: str) -> None:
    with pytest.raises(OpsFileError, match=f"entry 0: {message}"):
        parse_ops_records([record])


def test_mixed_key_or_priority_types_rejected() -> None:
    with pytest.raises(OpsFileError, match="key values mix types"):
        parse_ops_records(
            [
                {"op": "insert", "key": "a", "priority": 1},
                {"op": "insert", "key": 2, "priority": 1},
            ]
        )
    with pytest.raises(OpsFileError, match="priority values mix types"):
        parse_ops_text("insert a 1\ninsert b high\n")
    # ints and floats order against each other
    assert len(parse_ops_text("insert a 1\ninsert b 2.5\n")) == 2
