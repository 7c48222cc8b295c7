from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Sequence

from timetabler.schemas.generator import CourseShortfall, TeacherLoad
from timetabler.schemas.timetable import Course, ScheduleEntry, Teacher


def find_shortfalls(
    entries: Sequence[ScheduleEntry],
    courses: Sequence[Course],
    *,
    lab_sessions_per_batch: int = 1,
) -> list[CourseShortfall]:
    """Courses (or course batches) that got fewer sessions than they need."""
    lecture_counts: Counter[str] = Counter()
    lab_slot_counts: Counter[tuple[str, str]] = Counter()
    for entry in entries:
        if entry.is_lab_session and entry.batch is not None:
            lab_slot_counts[(entry.course_id, entry.batch)] += 1
        elif entry.is_whole_year:
            lecture_counts[entry.course_id] += 1

    shortfalls: list[CourseShortfall] = []
    for course in courses:
        if course.has_lab_batches:
            for batch in course.lab_batches():
                blocks = lab_slot_counts[(course.id, batch)] // 2
                if blocks < lab_sessions_per_batch:
                    shortfalls.append(
                        CourseShortfall(
                            course_id=course.id,
                            batch=batch,
                            expected=lab_sessions_per_batch,
                            scheduled=blocks,
                        )
                    )
        elif lecture_counts[course.id] < course.required_sessions:
            shortfalls.append(
                CourseShortfall(
                    course_id=course.id,
                    expected=course.required_sessions,
                    scheduled=lecture_counts[course.id],
                )
            )
    return shortfalls


def teacher_loads(entries: Sequence[ScheduleEntry], teachers: Sequence[Teacher]) -> list[TeacherLoad]:
    # Parallel batches of one lab occupy the teacher once per slot.
    lecture_slots: dict[str, set[tuple[str, str]]] = defaultdict(set)
    lab_slots: dict[str, set[tuple[str, str]]] = defaultdict(set)
    for entry in entries:
        bucket = lab_slots if entry.is_lab_session else lecture_slots
        bucket[entry.teacher_id].add((entry.day_of_week, entry.time_slot_id))

    names = {teacher.id: teacher.name for teacher in teachers}
    teacher_ids = list(names) + sorted((set(lecture_slots) | set(lab_slots)) - set(names))
    return [
        TeacherLoad(
            teacher_id=teacher_id,
            teacher_name=names.get(teacher_id),
            lecture_slots=len(lecture_slots.get(teacher_id, ())),
            lab_slots=len(lab_slots.get(teacher_id, ())),
        )
        for teacher_id in teacher_ids
    ]
