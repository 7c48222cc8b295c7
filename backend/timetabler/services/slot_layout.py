from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from timetabler.core.exceptions import ConfigurationError
from timetabler.schemas.timetable import TimeSlot


def slot_positions(time_slots: Iterable[TimeSlot]) -> dict[str, int]:
    """Map each time-slot id to its position in the day (first occurrence wins)."""
    positions: dict[str, int] = {}
    for index, slot in enumerate(time_slots):
        positions.setdefault(slot.id, index)
    return positions


class SlotLayout:
    """Ordered view of a day's time slots.

    Adjacency is positional: two slots are consecutive only when nothing (not
    even a break) sits between them in the layout.
    """

    def __init__(self, time_slots: Sequence[TimeSlot]) -> None:
        self.slots: tuple[TimeSlot, ...] = tuple(time_slots)
        self.positions = slot_positions(self.slots)
        if len(self.positions) != len(self.slots):
            counts = Counter(slot.id for slot in self.slots)
            duplicates = sorted(slot_id for slot_id, count in counts.items() if count > 1)
            raise ConfigurationError(
                "Time slot ids must be unique",
                details={"duplicates": duplicates},
            )
        self._by_id = {slot.id: slot for slot in self.slots}

    def __len__(self) -> int:
        return len(self.slots)

    def get(self, slot_id: str) -> TimeSlot | None:
        return self._by_id.get(slot_id)

    def index_of(self, slot_id: str) -> int | None:
        return self.positions.get(slot_id)

    def is_break(self, slot_id: str) -> bool:
        slot = self._by_id.get(slot_id)
        return bool(slot is not None and slot.is_break)

    @property
    def teaching_slots(self) -> list[TimeSlot]:
        return [slot for slot in self.slots if not slot.is_break]

    def next_slot(self, slot_id: str) -> TimeSlot | None:
        index = self.positions.get(slot_id)
        if index is None or index + 1 >= len(self.slots):
            return None
        return self.slots[index + 1]

    def double_periods(self) -> list[tuple[TimeSlot, TimeSlot]]:
        """Every pair of adjacent non-break slots, earliest first."""
        return [
            (first, second)
            for first, second in zip(self.slots, self.slots[1:])
            if not first.is_break and not second.is_break
        ]
