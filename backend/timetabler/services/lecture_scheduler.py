from __future__ import annotations

import logging
import random

from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import Classroom, Course, Teacher, TimeSlot
from timetabler.services.conflicts import (
    exceeds_consecutive_limit,
    is_break_slot,
    room_conflict,
    teacher_conflict,
    year_slot_occupied,
)
from timetabler.services.schedule_book import ScheduleBook

logger = logging.getLogger(__name__)


class RegularLectureScheduler:
    """Places whole-year lectures for one year by bounded random search."""

    def __init__(
        self,
        *,
        book: ScheduleBook,
        teachers_by_id: dict[str, Teacher],
        year_classrooms: list[Classroom],
        year: int,
        settings: GenerationSettings,
        rng: random.Random,
    ) -> None:
        self.book = book
        self.layout = book.layout
        self.teachers_by_id = teachers_by_id
        self.year_classrooms = year_classrooms
        self.year = year
        self.settings = settings
        self.random = rng

    def run(self, regular_courses: list[Course]) -> int:
        placed_before = len(self.book)
        for course in regular_courses:
            teacher = self.teachers_by_id.get(course.teacher_id)
            if teacher is None:
                logger.warning("Teacher %s not found for course %s", course.teacher_id, course.name)
                continue
            if not self.year_classrooms:
                logger.warning("No suitable classrooms for year %s", self.year)
                continue
            self._schedule_course(course, teacher)
        return len(self.book) - placed_before

    def _slot_is_free(self, teacher: Teacher, classroom: Classroom, day: str, slot: TimeSlot) -> bool:
        if is_break_slot(self.layout, slot.id):
            return False
        if room_conflict(self.book, day, slot.id, classroom.id):
            return False
        if teacher_conflict(self.book, day, slot.id, teacher.id):
            return False
        # A whole-year lecture collides with anything the year already attends, labs included.
        if year_slot_occupied(self.book, day, slot.id, self.year):
            return False
        return not exceeds_consecutive_limit(
            self.book,
            teacher,
            day,
            (slot.id,),
            default_max=self.settings.default_max_consecutive_lectures,
        )

    def _record(self, course: Course, teacher: Teacher, classroom: Classroom, day: str, slot: TimeSlot) -> None:
        self.book.record(
            day_of_week=day,
            time_slot_id=slot.id,
            course_id=course.id,
            teacher_id=teacher.id,
            classroom_id=classroom.id,
            year=self.year,
        )

    def _schedule_course(self, course: Course, teacher: Teacher) -> None:
        needed = course.required_sessions
        if needed <= 0:
            return
        teaching_slots = self.layout.teaching_slots
        if not teaching_slots:
            logger.warning("No teaching slots configured, course %s left unscheduled", course.name)
            return

        assigned = 0
        attempts = 0
        while assigned < needed and attempts < self.settings.lecture_attempt_budget:
            attempts += 1
            day = self.random.choice(self.settings.days)
            slot = self.random.choice(teaching_slots)
            classroom = self.random.choice(self.year_classrooms)
            if not self._slot_is_free(teacher, classroom, day, slot):
                continue

            self._record(course, teacher, classroom, day, slot)
            assigned += 1

            if assigned >= needed or self.random.random() >= self.settings.consecutive_lecture_probability:
                continue
            follow_up = self.layout.next_slot(slot.id)
            if follow_up is not None and self._slot_is_free(teacher, classroom, day, follow_up):
                self._record(course, teacher, classroom, day, follow_up)
                assigned += 1

        if assigned < needed:
            logger.warning(
                "Failed to schedule all sessions for course %s. Scheduled %d/%d sessions after %d attempts",
                course.name,
                assigned,
                needed,
                attempts,
            )
