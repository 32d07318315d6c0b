from __future__ import annotations

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from tqdm import tqdm

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lib.ops_file import Operation, load_ops
from lib.replay_config import ReplayConfig, load_replay_config, parse_args
from updatable_heap.diagnostics import HeapStatus, format_status
from updatable_heap.errors import EmptyHeapError
from updatable_heap.indexed_heap import UpdatableHeap

logger = logging.getLogger(__name__)


class Replayer:
    def __init__(self, cfg: ReplayConfig) -> None:
        self.cfg = cfg
        self.heap = UpdatableHeap(debug=cfg.check_invariants)

    def apply(self, op: Operation) -> str | None:
        """Run one operation; returns a line to report, if the operation produces one."""
        heap = self.heap
        if op.name == "insert":
            heap.insert_or_update(op.key, op.priority)
        elif op.name == "erase":
            heap.erase(op.key)
        elif op.name in ("pop", "stable_remove"):
            removed = heap.pop() if op.name == "pop" else heap.stable_remove()
            logger.debug("%s removed %r", op.name, removed)
        elif op.name in ("top", "stable_top"):
            try:
                key, priority = heap.top() if op.name == "top" else heap.stable_top()
            except EmptyHeapError:
                return f"{op.name}: <empty>"
            return f"{op.name}: {key!r} {priority!r}"
        elif op.name == "status":
            return format_status(heap.show_status())
        else:
            raise ValueError(f"{op.source}: unknown operation `{op.name}`")
        return None

    def run(self, ops: list[Operation]) -> HeapStatus:
        progress = tqdm(
            total=len(ops),
            dynamic_ncols=True,
            desc="replay",
            disable=not self.cfg.progress,
        )
        try:
            for op in ops:
                line = self.apply(op)
                if line is not None:
                    tqdm.write(line)
                progress.update(1)
                progress.set_postfix({"size": self.heap.size()})
        finally:
            progress.close()
        return self.heap.validate()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    cfg = load_replay_config(args)
    if args.print_config:
        print(json.dumps(asdict(cfg), indent=2, sort_keys=True))
        return 0

    cfg.logging.apply()
    if cfg.ops_path is None:
        raise ValueError("No operation file given. Use --ops or set ops_path.")

    ops = load_ops(cfg.ops_path)
    logger.info("replaying %d operations from %s", len(ops), cfg.ops_path)
    status = Replayer(cfg).run(ops)
    if cfg.show_status:
        print(format_status(status))
    return 0 if status.ok else 1


if __name__ == "__main__":
    sys.exit(main())
