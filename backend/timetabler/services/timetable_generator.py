from __future__ import annotations

import logging
import random
from collections import defaultdict
from collections.abc import Sequence

from timetabler.core.config import get_settings
from timetabler.core.exceptions import InvalidTimetableInputError
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import (
    DEFAULT_TIME_SLOTS,
    Classroom,
    Course,
    Teacher,
    TimeSlot,
    Timetable,
)
from timetabler.services.lab_scheduler import LabSessionScheduler
from timetabler.services.lecture_scheduler import RegularLectureScheduler
from timetabler.services.schedule_book import ScheduleBook
from timetabler.services.slot_layout import SlotLayout

logger = logging.getLogger(__name__)


def _require_list(name: str, value) -> None:
    if value is None:
        raise InvalidTimetableInputError(name)


class TimetableGenerator:
    """Builds a weekly schedule year by year: labs first, then common lectures.

    Output is best effort. Anything that cannot be placed within the attempt
    budgets is left out and logged; callers reconcile with
    ``timetabler.services.coverage.find_shortfalls``. Runs are reproducible
    only when ``settings.random_seed`` is set.
    """

    def __init__(
        self,
        *,
        time_slots: Sequence[TimeSlot] | None = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        self.settings = settings or GenerationSettings.from_settings(get_settings())
        self.layout = SlotLayout(DEFAULT_TIME_SLOTS if time_slots is None else time_slots)
        self.random = random.Random(self.settings.random_seed)

    @staticmethod
    def group_courses_by_year(courses: Sequence[Course]) -> dict[int, list[Course]]:
        courses_by_year: dict[int, list[Course]] = defaultdict(list)
        for course in courses:
            if course.year is None:
                logger.warning("Course %s has no year assignment, skipping", course.name)
                continue
            courses_by_year[course.year].append(course)
        return dict(sorted(courses_by_year.items()))

    @staticmethod
    def split_rooms(classrooms: Sequence[Classroom], year: int) -> tuple[list[Classroom], list[Classroom]]:
        year_classrooms = [room for room in classrooms if not room.is_lab and room.serves_year(year)]
        year_labs = [room for room in classrooms if room.is_lab and room.serves_year(year)]
        return year_classrooms, year_labs

    @staticmethod
    def split_courses(courses: Sequence[Course]) -> tuple[list[Course], list[Course]]:
        lab_courses = [course for course in courses if course.has_lab_batches]
        # Lab courses without batch information degrade to lecture-only.
        regular_courses = [course for course in courses if not course.has_lab_batches]
        return lab_courses, regular_courses

    def generate(
        self,
        teachers: Sequence[Teacher],
        classrooms: Sequence[Classroom],
        courses: Sequence[Course],
    ) -> Timetable:
        _require_list("teachers", teachers)
        _require_list("classrooms", classrooms)
        _require_list("courses", courses)

        logger.info(
            "Starting timetable generation with %d teachers, %d classrooms, %d courses",
            len(teachers),
            len(classrooms),
            len(courses),
        )
        book = ScheduleBook(self.layout)
        teachers_by_id = {teacher.id: teacher for teacher in teachers}
        courses_by_year = self.group_courses_by_year(courses)

        for year, year_courses in courses_by_year.items():
            year_classrooms, year_labs = self.split_rooms(classrooms, year)
            logger.debug(
                "Year %s has %d regular classrooms and %d labs",
                year,
                len(year_classrooms),
                len(year_labs),
            )
            if not year_classrooms:
                logger.warning("No classrooms assigned for year %s, skipping %d course(s)", year, len(year_courses))
                continue

            lab_courses, regular_courses = self.split_courses(year_courses)
            logger.debug(
                "Year %s has %d lab courses and %d regular courses",
                year,
                len(lab_courses),
                len(regular_courses),
            )

            LabSessionScheduler(
                book=book,
                teachers_by_id=teachers_by_id,
                year_labs=year_labs,
                year=year,
                settings=self.settings,
                rng=self.random,
            ).run(lab_courses)
            RegularLectureScheduler(
                book=book,
                teachers_by_id=teachers_by_id,
                year_classrooms=year_classrooms,
                year=year,
                settings=self.settings,
                rng=self.random,
            ).run(regular_courses)

        logger.info("Timetable generation complete. Created %d entries", len(book))
        if len(book) == 0 and courses:
            logger.warning(
                "No timetable entries were generated; check year assignments, teachers and room pools"
            )
        return Timetable(entries=book.entries)


def generate_timetable(
    teachers: Sequence[Teacher],
    classrooms: Sequence[Classroom],
    courses: Sequence[Course],
    *,
    time_slots: Sequence[TimeSlot] | None = None,
    settings: GenerationSettings | None = None,
) -> Timetable:
    return TimetableGenerator(time_slots=time_slots, settings=settings).generate(teachers, classrooms, courses)
