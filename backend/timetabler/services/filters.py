from __future__ import annotations

from collections.abc import Sequence

from timetabler.schemas.timetable import Batch, ScheduleEntry, TimeSlot
from timetabler.services.slot_layout import slot_positions


def get_teacher_timetable(entries: Sequence[ScheduleEntry], teacher_id: str) -> list[ScheduleEntry]:
    return [entry for entry in entries if entry.teacher_id == teacher_id]


def get_classroom_timetable(entries: Sequence[ScheduleEntry], classroom_id: str) -> list[ScheduleEntry]:
    return [entry for entry in entries if entry.classroom_id == classroom_id]


def get_year_timetable(
    entries: Sequence[ScheduleEntry],
    year: int,
    batch: Batch | None = None,
) -> list[ScheduleEntry]:
    """Entries for a year; with a batch, that batch's sessions plus the common lectures."""
    filtered = [entry for entry in entries if entry.year == year]
    if batch:
        filtered = [entry for entry in filtered if entry.batch == batch or entry.is_whole_year]
    return filtered


def sort_entries(
    entries: Sequence[ScheduleEntry],
    days: Sequence[str],
    time_slots: Sequence[TimeSlot],
) -> list[ScheduleEntry]:
    day_order = {day: index for index, day in enumerate(days)}
    positions = slot_positions(time_slots)
    return sorted(
        entries,
        key=lambda entry: (
            day_order.get(entry.day_of_week, len(day_order)),
            positions.get(entry.time_slot_id, len(positions)),
        ),
    )
