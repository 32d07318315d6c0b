from __future__ import annotations

import json
import math
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from lib.config_base import parse_value

# operation name -> required arguments
OP_ARGS: dict[str, tuple[str, ...]] = {
    "insert": ("key", "priority"),
    "erase": ("key",),
    "pop": (),
    "stable_remove": (),
    "top": (),
    "stable_top": (),
    "status": (),
}


class OpsFileError(ValueError):
    pass


@dataclass(frozen=True)
class Operation:
    name: str
    key: Any = None
    priority: Any = None
    source: str = ""


def _check_key(key: Any, source: str) -> None:
    # bool keys would collide with 0 and 1 in the position index
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise OpsFileError(f"{source}: key must be a string or an integer, got {key!r}")


def _check_priority(priority: Any, source: str) -> None:
    if isinstance(priority, float) and not math.isfinite(priority):
        raise OpsFileError(f"{source}: priority must be finite, got {priority!r}")


def _type_name(value: Any) -> str:
    return "number" if isinstance(value, (int, float)) else type(value).__name__


def _check_comparable(ops: list[Operation]) -> None:
    # the heap orders by (priority, key), so each must share one type
    for arg in ("key", "priority"):
        kinds = sorted(
            {_type_name(getattr(op, arg)) for op in ops if getattr(op, arg) is not None}
        )
        if len(kinds) > 1:
            raise OpsFileError(f"Operation {arg} values mix types: {', '.join(kinds)}")


def _make_operation(name: Any, args: Mapping[str, Any], source: str) -> Operation:
    if not isinstance(name, str) or name not in OP_ARGS:
        raise OpsFileError(f"{source}: unknown operation `{name}`")
    expected = OP_ARGS[name]
    missing = [arg for arg in expected if args.get(arg) is None]
    if missing:
        raise OpsFileError(f"{source}: `{name}` needs {', '.join(missing)}")
    extra = sorted(arg for arg in args if arg not in expected)
    if extra:
        raise OpsFileError(f"{source}: `{name}` takes no {', '.join(extra)}")
    if "key" in args:
        _check_key(args["key"], source)
    if "priority" in args:
        _check_priority(args["priority"], source)
    return Operation(name=name, source=source, **args)


def parse_ops_text(text: str) -> list[Operation]:
    """Parse ``insert <key> <priority>`` style lines; ``#`` starts a comment.

    Keys are kept as strings, so ``1``, ``true`` and ``1.0`` name three elements.
    """
    ops: list[Operation] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        tokens = shlex.split(line, comments=True)
        if not tokens:
            continue
        name, *values = tokens
        source = f"line {lineno}"
        if name not in OP_ARGS:
            raise OpsFileError(f"{source}: unknown operation `{name}`")
        expected = OP_ARGS[name]
        if len(values) > len(expected):
            raise OpsFileError(f"{source}: too many arguments for `{name}`")
        args = {
            arg: raw if arg == "key" else parse_value(raw)
            for arg, raw in zip(expected, values)
        }
        ops.append(_make_operation(name, args, source))
    _check_comparable(ops)
    return ops


def parse_ops_records(records: Any) -> list[Operation]:
    if not isinstance(records, list):
        raise OpsFileError("Operation file must contain a list of operations.")
    ops: list[Operation] = []
    for i, record in enumerate(records):
        source = f"entry {i}"
        if not isinstance(record, Mapping) or "op" not in record:
            raise OpsFileError(f"{source}: expected a mapping with an `op` field")
        args = {k: v for k, v in record.items() if k != "op"}
        ops.append(_make_operation(record["op"], args, source))
    _check_comparable(ops)
    return ops


def load_ops(path: str | Path) -> list[Operation]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Operation file not found: {p}")

    if p.suffix == ".json":
        return parse_ops_records(json.loads(p.read_text()))
    if p.suffix in (".yaml", ".yml"):
        import yaml  # type: ignore

        return parse_ops_records(yaml.safe_load(p.read_text()))
    if p.suffix in (".txt", ".ops", ""):
        return parse_ops_text(p.read_text())
    raise OpsFileError(
        f"Unsupported operation file format: {p.suffix}. Use .txt, .json or .yaml."
    )
