from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class SlotStatus:
    key: Any
    priority: Any
    index: int
    recorded_index: int | None

    @property
    def indexed(self) -> bool:
        return self.recorded_index == self.index


@dataclass
class HeapStatus:
    slots: list[SlotStatus] = field(default_factory=list)
    # (parent index, child index) pairs where the child outranks its parent
    order_violations: list[tuple[int, int]] = field(default_factory=list)
    # keys present in the position index but in no slot
    stray_keys: list[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return (
            not self.order_violations
            and not self.stray_keys
            and all(slot.indexed for slot in self.slots)
        )


def inspect_entries(
    entries: Sequence[Sequence[Any]], position: Mapping[Any, int]
) -> HeapStatus:
    """Walk a heap array of ``[priority, key]`` entries once.

    Every slot is reported with the index its key is recorded under, and
    every child that compares strictly greater than its parent is listed as
    an order violation.
    """
    status = HeapStatus()
    n = len(entries)
    for idx, (priority, key) in enumerate(entries):
        status.slots.append(
            SlotStatus(
                key=key,
                priority=priority,
                index=idx,
                recorded_index=position.get(key),
            )
        )
        for child in (2 * idx + 1, 2 * idx + 2):
            if child < n and entries[child] > entries[idx]:
                status.order_violations.append((idx, child))

    seen = {key for _, key in entries}
    status.stray_keys = [key for key in position if key not in seen]
    return status


def format_status(status: HeapStatus) -> str:
    lines = [
        f"key: {slot.key!r} position: {slot.recorded_index} priority: {slot.priority!r}"
        + ("" if slot.indexed else f" (stored at {slot.index})")
        for slot in status.slots
    ]
    for parent, child in status.order_violations:
        lines.append(f"order violation: slot {child} outranks its parent {parent}")
    if status.stray_keys:
        lines.append(f"stray index keys: {status.stray_keys!r}")
    lines.append(f"heap ok: {status.ok} ({len(status.slots)} elements)")
    return "\n".join(lines)
