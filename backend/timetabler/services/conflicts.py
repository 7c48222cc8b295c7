"""Conflict predicates shared by the generator and the validator.

Every predicate answers "would this candidate placement conflict?" against
what a ``ScheduleBook`` already holds, and never mutates the book.
"""
from __future__ import annotations

from collections.abc import Iterable

from timetabler.schemas.timetable import Batch, Teacher
from timetabler.services.schedule_book import ScheduleBook
from timetabler.services.slot_layout import SlotLayout


def effective_max_consecutive(teacher: Teacher | None, default: int) -> int:
    if teacher is None or not teacher.max_consecutive_lectures:
        return default
    return teacher.max_consecutive_lectures


def lab_day_cap(max_batch_labs_per_day: int, lab_room_count: int) -> int:
    return min(max_batch_labs_per_day, lab_room_count)


def longest_adjacent_run(positions: Iterable[int]) -> int:
    ordered = sorted(set(positions))
    if not ordered:
        return 0
    longest = current = 1
    for previous, position in zip(ordered, ordered[1:]):
        current = current + 1 if position == previous + 1 else 1
        longest = max(longest, current)
    return longest


def adjacent_runs(positions: Iterable[int]) -> list[list[int]]:
    """Split slot positions into maximal runs of consecutive values."""
    runs: list[list[int]] = []
    for position in sorted(set(positions)):
        if runs and position == runs[-1][-1] + 1:
            runs[-1].append(position)
        else:
            runs.append([position])
    return runs


def is_break_slot(layout: SlotLayout, slot_id: str) -> bool:
    return layout.is_break(slot_id)


def room_conflict(book: ScheduleBook, day: str, slot_id: str, classroom_id: str) -> bool:
    return bool(book.room_entries(day, slot_id, classroom_id))


def teacher_conflict(book: ScheduleBook, day: str, slot_id: str, teacher_id: str) -> bool:
    return bool(book.teacher_entries(day, slot_id, teacher_id))


def batch_slot_conflict(book: ScheduleBook, day: str, slot_id: str, year: int | None, batch: Batch) -> bool:
    return bool(book.batch_entries(day, slot_id, year, batch))


def year_lecture_conflict(book: ScheduleBook, day: str, slot_id: str, year: int | None) -> bool:
    """A whole-year lecture already holds this slot for every batch of the year."""
    return any(entry.is_whole_year for entry in book.year_entries(day, slot_id, year))


def year_slot_occupied(book: ScheduleBook, day: str, slot_id: str, year: int | None) -> bool:
    """Any session of the year (lecture or batch lab) already holds this slot."""
    return bool(book.year_entries(day, slot_id, year))


def exceeds_consecutive_limit(
    book: ScheduleBook,
    teacher: Teacher,
    day: str,
    slot_ids: Iterable[str],
    *,
    default_max: int,
) -> bool:
    """True when adding ``slot_ids`` together would give the teacher too long a run."""
    positions = book.teacher_positions(teacher.id, day)
    for slot_id in slot_ids:
        position = book.layout.index_of(slot_id)
        if position is None:
            return True
        positions.add(position)
    return longest_adjacent_run(positions) > effective_max_consecutive(teacher, default_max)


def batch_lab_day_conflict(
    book: ScheduleBook,
    course_id: str,
    day: str,
    year: int | None,
    batch: Batch,
    *,
    cap: int,
) -> bool:
    if book.has_lab_on(course_id, year, batch, day):
        return True
    batches = book.lab_batches_on(day, year)
    batches.add(batch)
    return len(batches) > cap
