from __future__ import annotations

from collections import Counter, defaultdict

from timetabler.schemas.timetable import Batch, ScheduleEntry
from timetabler.services.slot_layout import SlotLayout


class ScheduleBook:
    """Accumulator for the entries of a single generation run.

    Each phase receives the book explicitly and sees everything earlier phases
    committed. Occupancy is indexed on insert so the conflict predicates stay
    cheap; the indexes always describe exactly ``entries``.
    """

    def __init__(self, layout: SlotLayout) -> None:
        self.layout = layout
        self._entries: list[ScheduleEntry] = []
        self._next_id = 1
        self._room_occ: dict[tuple[str, str, str], list[ScheduleEntry]] = defaultdict(list)
        self._teacher_occ: dict[tuple[str, str, str], list[ScheduleEntry]] = defaultdict(list)
        self._batch_occ: dict[tuple[str, str, int | None, str], list[ScheduleEntry]] = defaultdict(list)
        self._year_occ: dict[tuple[str, str, int | None], list[ScheduleEntry]] = defaultdict(list)
        self._teacher_day_positions: dict[tuple[str, str], set[int]] = defaultdict(set)
        self._lab_batches_by_day: dict[tuple[str, int | None], set[str]] = defaultdict(set)
        self._lab_slots: dict[tuple[str, int | None, str], Counter[str]] = defaultdict(Counter)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[ScheduleEntry]:
        return list(self._entries)

    def add(self, entry: ScheduleEntry) -> ScheduleEntry:
        day, slot_id = entry.day_of_week, entry.time_slot_id
        self._entries.append(entry)
        self._room_occ[(day, slot_id, entry.classroom_id)].append(entry)
        self._teacher_occ[(day, slot_id, entry.teacher_id)].append(entry)
        self._year_occ[(day, slot_id, entry.year)].append(entry)
        if entry.batch is not None:
            self._batch_occ[(day, slot_id, entry.year, entry.batch)].append(entry)
        position = self.layout.index_of(slot_id)
        if position is not None:
            self._teacher_day_positions[(entry.teacher_id, day)].add(position)
        if entry.is_lab_session and entry.batch is not None:
            self._lab_batches_by_day[(day, entry.year)].add(entry.batch)
            self._lab_slots[(entry.course_id, entry.year, entry.batch)][day] += 1
        return entry

    def record(self, **fields) -> ScheduleEntry:
        entry = ScheduleEntry(id=f"entry{self._next_id}", **fields)
        self._next_id += 1
        return self.add(entry)

    def room_entries(self, day: str, slot_id: str, classroom_id: str) -> list[ScheduleEntry]:
        return self._room_occ.get((day, slot_id, classroom_id), [])

    def teacher_entries(self, day: str, slot_id: str, teacher_id: str) -> list[ScheduleEntry]:
        return self._teacher_occ.get((day, slot_id, teacher_id), [])

    def batch_entries(self, day: str, slot_id: str, year: int | None, batch: Batch) -> list[ScheduleEntry]:
        return self._batch_occ.get((day, slot_id, year, batch), [])

    def year_entries(self, day: str, slot_id: str, year: int | None) -> list[ScheduleEntry]:
        return self._year_occ.get((day, slot_id, year), [])

    def teacher_positions(self, teacher_id: str, day: str) -> set[int]:
        return set(self._teacher_day_positions.get((teacher_id, day), ()))

    def lab_batches_on(self, day: str, year: int | None) -> set[str]:
        return set(self._lab_batches_by_day.get((day, year), ()))

    def has_lab_on(self, course_id: str, year: int | None, batch: Batch, day: str) -> bool:
        return self._lab_slots.get((course_id, year, batch), Counter())[day] > 0

    def lab_blocks(self, course_id: str, year: int | None, batch: Batch) -> int:
        # Every lab block is a double period.
        return sum(self._lab_slots.get((course_id, year, batch), Counter()).values()) // 2
