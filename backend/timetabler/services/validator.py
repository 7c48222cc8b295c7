"""Post-hoc audit of a weekly schedule.

Works on any entry list, generated or hand-written, so nothing the generator
guarantees is assumed here. Each ``find_*`` function returns the offending
entries in their original order.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable, Sequence

from timetabler.core.exceptions import InvalidTimetableInputError
from timetabler.schemas.timetable import (
    Classroom,
    Course,
    ScheduleEntry,
    Teacher,
    TimeSlot,
    ValidationError,
    ViolationType,
)
from timetabler.services.conflicts import adjacent_runs, effective_max_consecutive, lab_day_cap
from timetabler.services.slot_layout import slot_positions

DEFAULT_MAX_CONSECUTIVE_LECTURES = 2
DEFAULT_MAX_BATCH_LABS_PER_DAY = 2


def _group_indices(
    entries: Sequence[ScheduleEntry],
    key: Callable[[ScheduleEntry], Hashable],
    include: Callable[[ScheduleEntry], bool] = lambda entry: True,
) -> dict[Hashable, list[int]]:
    groups: dict[Hashable, list[int]] = defaultdict(list)
    for index, entry in enumerate(entries):
        if include(entry):
            groups[key(entry)].append(index)
    return groups


def _pick(entries: Sequence[ScheduleEntry], indices: Iterable[int]) -> list[ScheduleEntry]:
    return [entries[index] for index in sorted(set(indices))]


def is_parallel_lab_group(group: Sequence[ScheduleEntry]) -> bool:
    """Batches of one lab course running side by side under the same teacher."""
    if len(group) < 2 or not all(entry.is_lab_session and entry.batch for entry in group):
        return False
    if len({(entry.course_id, entry.year) for entry in group}) != 1:
        return False
    return len({entry.batch for entry in group}) == len(group)


def find_classroom_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    groups = _group_indices(entries, lambda e: (e.day_of_week, e.time_slot_id, e.classroom_id))
    return _pick(entries, (i for group in groups.values() if len(group) > 1 for i in group))


def find_teacher_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    flagged: list[int] = []
    groups = _group_indices(entries, lambda e: (e.day_of_week, e.time_slot_id, e.teacher_id))
    for group in groups.values():
        if len(group) < 2 or is_parallel_lab_group([entries[i] for i in group]):
            continue
        flagged.extend(group)
    return _pick(entries, flagged)


def find_break_time_conflicts(entries: Sequence[ScheduleEntry], time_slots: Sequence[TimeSlot]) -> list[ScheduleEntry]:
    break_slot_ids = {slot.id for slot in time_slots if slot.is_break}
    return [entry for entry in entries if entry.time_slot_id in break_slot_ids]


def find_consecutive_lecture_conflicts(
    entries: Sequence[ScheduleEntry],
    teachers: Sequence[Teacher],
    time_slots: Sequence[TimeSlot],
    *,
    default_max: int = DEFAULT_MAX_CONSECUTIVE_LECTURES,
) -> list[ScheduleEntry]:
    positions = slot_positions(time_slots)
    teacher_map = {teacher.id: teacher for teacher in teachers}
    flagged: list[int] = []

    groups = _group_indices(
        entries,
        lambda e: (e.teacher_id, e.day_of_week),
        include=lambda e: e.time_slot_id in positions,
    )
    for (teacher_id, _day), group in groups.items():
        max_consecutive = effective_max_consecutive(teacher_map.get(teacher_id), default_max)
        by_position: dict[int, list[int]] = defaultdict(list)
        for index in group:
            by_position[positions[entries[index].time_slot_id]].append(index)
        for run in adjacent_runs(by_position):
            if len(run) > max_consecutive:
                for position in run:
                    flagged.extend(by_position[position])
    return _pick(entries, flagged)


def find_batch_lab_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    groups = _group_indices(
        entries,
        lambda e: (e.day_of_week, e.time_slot_id, e.year, e.batch),
        include=lambda e: e.batch is not None,
    )
    return _pick(entries, (i for group in groups.values() if len(group) > 1 for i in group))


def find_day_lab_limit_conflicts(
    entries: Sequence[ScheduleEntry],
    classrooms: Sequence[Classroom],
    *,
    max_batch_labs_per_day: int = DEFAULT_MAX_BATCH_LABS_PER_DAY,
) -> list[ScheduleEntry]:
    flagged: list[int] = []
    groups = _group_indices(
        entries,
        lambda e: (e.day_of_week, e.year),
        include=lambda e: e.is_lab_session and e.batch is not None,
    )
    for (_day, year), group in groups.items():
        lab_rooms = [room for room in classrooms if room.is_lab and (year is None or room.serves_year(year))]
        cap = lab_day_cap(max_batch_labs_per_day, len(lab_rooms)) if lab_rooms else max_batch_labs_per_day
        if len({entries[i].batch for i in group}) > cap:
            flagged.extend(group)
    return _pick(entries, flagged)


def find_same_course_lab_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    groups = _group_indices(
        entries,
        lambda e: (e.batch, e.course_id, e.day_of_week, e.year),
        include=lambda e: e.is_lab_session and e.batch is not None,
    )
    # One lab block is two slots.
    return _pick(entries, (i for group in groups.values() if len(group) > 2 for i in group))


def find_lab_batch_room_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    groups = _group_indices(
        entries,
        lambda e: (e.day_of_week, e.time_slot_id, e.classroom_id),
        include=lambda e: e.is_lab_session,
    )
    return _pick(
        entries,
        (i for group in groups.values() if len({entries[j].batch for j in group}) > 1 for i in group),
    )


def find_lab_lecture_overlap_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    flagged: list[int] = []
    groups = _group_indices(entries, lambda e: (e.day_of_week, e.time_slot_id, e.year))
    for group in groups.values():
        members = [entries[i] for i in group]
        has_lab = any(entry.is_lab_session for entry in members)
        has_lecture = any(entry.is_whole_year for entry in members)
        if has_lab and has_lecture:
            flagged.extend(group)
    return _pick(entries, flagged)


def find_year_lecture_conflicts(entries: Sequence[ScheduleEntry]) -> list[ScheduleEntry]:
    groups = _group_indices(
        entries,
        lambda e: (e.day_of_week, e.time_slot_id, e.year),
        include=lambda e: e.is_whole_year and e.year is not None,
    )
    return _pick(entries, (i for group in groups.values() if len(group) > 1 for i in group))


def find_lab_double_period_conflicts(
    entries: Sequence[ScheduleEntry],
    time_slots: Sequence[TimeSlot],
) -> list[ScheduleEntry]:
    positions = slot_positions(time_slots)
    occupied: set[tuple] = set()
    for entry in entries:
        if entry.is_lab_session and entry.time_slot_id in positions:
            occupied.add(_lab_partner_key(entry, positions[entry.time_slot_id]))

    flagged: list[ScheduleEntry] = []
    for entry in entries:
        if not entry.is_lab_session:
            continue
        position = positions.get(entry.time_slot_id)
        if position is None:
            flagged.append(entry)
            continue
        has_partner = (
            _lab_partner_key(entry, position - 1) in occupied
            or _lab_partner_key(entry, position + 1) in occupied
        )
        if not has_partner:
            flagged.append(entry)
    return flagged


def _lab_partner_key(entry: ScheduleEntry, position: int) -> tuple:
    return (
        entry.course_id,
        entry.batch,
        entry.teacher_id,
        entry.classroom_id,
        entry.day_of_week,
        entry.year,
        position,
    )


def validate_timetable(
    entries: Sequence[ScheduleEntry],
    teachers: Sequence[Teacher],
    classrooms: Sequence[Classroom],
    courses: Sequence[Course],
    time_slots: Sequence[TimeSlot],
    *,
    default_max_consecutive_lectures: int = DEFAULT_MAX_CONSECUTIVE_LECTURES,
    max_batch_labs_per_day: int = DEFAULT_MAX_BATCH_LABS_PER_DAY,
) -> list[ValidationError]:
    """Return every violation found, grouped by kind; empty means conformant."""
    for name, value in (
        ("entries", entries),
        ("teachers", teachers),
        ("classrooms", classrooms),
        ("courses", courses),
        ("time_slots", time_slots),
    ):
        if value is None:
            raise InvalidTimetableInputError(name)

    checks: list[tuple[ViolationType, str, Callable[[], list[ScheduleEntry]]]] = [
        (
            ViolationType.classroom_conflict,
            "One or more classrooms have multiple lectures scheduled at the same time",
            lambda: find_classroom_conflicts(entries),
        ),
        (
            ViolationType.teacher_conflict,
            "One or more teachers are scheduled in two places at the same time",
            lambda: find_teacher_conflicts(entries),
        ),
        (
            ViolationType.break_time_conflict,
            "Lectures are scheduled during designated break times",
            lambda: find_break_time_conflicts(entries, time_slots),
        ),
        (
            ViolationType.consecutive_lecture_conflict,
            "Some teachers have too many consecutive lectures",
            lambda: find_consecutive_lecture_conflicts(
                entries,
                teachers,
                time_slots,
                default_max=default_max_consecutive_lectures,
            ),
        ),
        (
            ViolationType.batch_lab_conflict,
            "A batch is scheduled for more than one session at the same time",
            lambda: find_batch_lab_conflicts(entries),
        ),
        (
            ViolationType.day_lab_limit_conflict,
            "Too many batches have lab sessions on the same day",
            lambda: find_day_lab_limit_conflicts(
                entries,
                classrooms,
                max_batch_labs_per_day=max_batch_labs_per_day,
            ),
        ),
        (
            ViolationType.same_course_lab_conflict,
            "A batch has more than one lab session for the same course scheduled on the same day",
            lambda: find_same_course_lab_conflicts(entries),
        ),
        (
            ViolationType.lab_batch_room_conflict,
            "Multiple batches are assigned to the same lab room at the same time",
            lambda: find_lab_batch_room_conflicts(entries),
        ),
        (
            ViolationType.lab_lecture_overlap_conflict,
            "A lab session overlaps a lecture for the whole year",
            lambda: find_lab_lecture_overlap_conflicts(entries),
        ),
        (
            ViolationType.year_lecture_conflict,
            "A year has two common lectures scheduled at the same time",
            lambda: find_year_lecture_conflicts(entries),
        ),
        (
            ViolationType.lab_double_period_conflict,
            "Lab sessions must occupy two consecutive slots in the same room",
            lambda: find_lab_double_period_conflicts(entries, time_slots),
        ),
    ]

    errors: list[ValidationError] = []
    for violation_type, message, finder in checks:
        affected = finder()
        if affected:
            errors.append(ValidationError(type=violation_type, message=message, affected_entries=affected))
    return errors
