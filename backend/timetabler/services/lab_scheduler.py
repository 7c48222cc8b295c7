from __future__ import annotations

import logging
import random

from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import Batch, Classroom, Course, Teacher, TimeSlot
from timetabler.services.conflicts import (
    batch_lab_day_conflict,
    batch_slot_conflict,
    exceeds_consecutive_limit,
    lab_day_cap,
    room_conflict,
    teacher_conflict,
    year_lecture_conflict,
)
from timetabler.services.schedule_book import ScheduleBook

logger = logging.getLogger(__name__)


class LabSessionScheduler:
    """Places double-period lab sessions for every (course, batch) of one year.

    Pass one walks days and slot pairs in order and seats as many batches of a
    course side by side as there are free lab rooms. Pass two retries whatever
    is left with a bounded random search.
    """

    def __init__(
        self,
        *,
        book: ScheduleBook,
        teachers_by_id: dict[str, Teacher],
        year_labs: list[Classroom],
        year: int,
        settings: GenerationSettings,
        rng: random.Random,
    ) -> None:
        self.book = book
        self.layout = book.layout
        self.teachers_by_id = teachers_by_id
        self.year_labs = year_labs
        self.year = year
        self.settings = settings
        self.random = rng
        self.day_cap = lab_day_cap(settings.max_batch_labs_per_day, len(year_labs))

    def run(self, lab_courses: list[Course]) -> int:
        placed_before = len(self.book)
        schedulable: list[tuple[Course, Teacher]] = []
        for course in lab_courses:
            teacher = self.teachers_by_id.get(course.teacher_id)
            if teacher is None:
                logger.warning("Teacher %s not found for lab course %s", course.teacher_id, course.name)
                continue
            if not self.year_labs:
                logger.warning("No labs available for year %s, course %s gets no lab sessions", self.year, course.name)
                continue
            schedulable.append((course, teacher))

        for course, teacher in schedulable:
            self._parallel_pass(course, teacher)

        for course, teacher in schedulable:
            for batch in course.lab_batches():
                self._sequential_pass(course, teacher, batch)

        return len(self.book) - placed_before

    def _needs_lab(self, course: Course, batch: Batch) -> bool:
        return self.book.lab_blocks(course.id, self.year, batch) < self.settings.lab_sessions_per_batch

    def _remaining_batches(self, course: Course, day: str) -> list[Batch]:
        return [
            batch
            for batch in course.lab_batches()
            if self._needs_lab(course, batch) and not self.book.has_lab_on(course.id, self.year, batch, day)
        ]

    def _teacher_can_take(self, teacher: Teacher, day: str, first: TimeSlot, second: TimeSlot) -> bool:
        if teacher_conflict(self.book, day, first.id, teacher.id):
            return False
        if teacher_conflict(self.book, day, second.id, teacher.id):
            return False
        return not exceeds_consecutive_limit(
            self.book,
            teacher,
            day,
            (first.id, second.id),
            default_max=self.settings.default_max_consecutive_lectures,
        )

    def _batch_can_take(self, course: Course, batch: Batch, day: str, first: TimeSlot, second: TimeSlot) -> bool:
        for slot in (first, second):
            if batch_slot_conflict(self.book, day, slot.id, self.year, batch):
                return False
            if year_lecture_conflict(self.book, day, slot.id, self.year):
                return False
        return not batch_lab_day_conflict(self.book, course.id, day, self.year, batch, cap=self.day_cap)

    def _free_labs(self, day: str, first: TimeSlot, second: TimeSlot) -> list[Classroom]:
        return [
            lab
            for lab in self.year_labs
            if not room_conflict(self.book, day, first.id, lab.id)
            and not room_conflict(self.book, day, second.id, lab.id)
        ]

    def _commit_block(
        self,
        course: Course,
        teacher: Teacher,
        lab: Classroom,
        batch: Batch,
        day: str,
        first: TimeSlot,
        second: TimeSlot,
    ) -> None:
        for slot in (first, second):
            self.book.record(
                day_of_week=day,
                time_slot_id=slot.id,
                course_id=course.id,
                teacher_id=teacher.id,
                classroom_id=lab.id,
                batch=batch,
                is_lab_session=True,
                year=self.year,
            )

    def _parallel_pass(self, course: Course, teacher: Teacher) -> None:
        double_periods = self.layout.double_periods()
        for day in self.settings.days:
            for first, second in double_periods:
                remaining = self._remaining_batches(course, day)
                if not remaining:
                    break
                if not self._teacher_can_take(teacher, day, first, second):
                    continue
                for batch in remaining:
                    if not self._batch_can_take(course, batch, day, first, second):
                        continue
                    free_labs = self._free_labs(day, first, second)
                    if not free_labs:
                        break
                    self._commit_block(course, teacher, free_labs[0], batch, day, first, second)

    def _sequential_pass(self, course: Course, teacher: Teacher, batch: Batch) -> None:
        if not self._needs_lab(course, batch):
            return
        slots = self.layout.slots
        if len(slots) < 2:
            logger.warning("Slot layout too short for a double period, lab for %s batch %s skipped", course.name, batch)
            return

        attempts = 0
        while self._needs_lab(course, batch) and attempts < self.settings.lab_attempt_budget:
            attempts += 1
            day = self.random.choice(self.settings.days)
            if self.book.has_lab_on(course.id, self.year, batch, day):
                continue
            start = self.random.randrange(len(slots) - 1)
            first, second = slots[start], slots[start + 1]
            if first.is_break or second.is_break:
                continue
            if not self._batch_can_take(course, batch, day, first, second):
                continue
            if not self._teacher_can_take(teacher, day, first, second):
                continue
            free_labs = self._free_labs(day, first, second)
            if not free_labs:
                continue
            self._commit_block(course, teacher, self.random.choice(free_labs), batch, day, first, second)

        if self._needs_lab(course, batch):
            logger.warning(
                "Failed to schedule lab for course %s batch %s after %d attempts",
                course.name,
                batch,
                attempts,
            )
