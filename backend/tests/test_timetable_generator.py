import logging

import pytest

from timetabler.core.exceptions import InvalidTimetableInputError
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import DEFAULT_TIME_SLOTS, Classroom, Course, Teacher
from timetabler.services.coverage import find_shortfalls
from timetabler.services.timetable_generator import TimetableGenerator, generate_timetable
from timetabler.services.validator import validate_timetable


def _validate(entries, teachers, classrooms, courses):
    return validate_timetable(entries, teachers, classrooms, courses, DEFAULT_TIME_SLOTS)


def test_empty_inputs_give_an_empty_timetable(seeded_settings):
    timetable = generate_timetable([], [], [], settings=seeded_settings)
    assert timetable.entries == []


def test_missing_collection_is_rejected():
    with pytest.raises(InvalidTimetableInputError, match="teachers must be a list, got None"):
        TimetableGenerator().generate(None, [], [])


def test_single_course_gets_all_its_sessions(seeded_settings):
    teachers = [Teacher(id="t1", name="Dr. Jane Smith", max_consecutive_lectures=2)]
    classrooms = [Classroom(id="c1", name="A101", capacity=60, year_assigned=1)]
    courses = [
        Course(id="crs1", name="Calculus I", subject_code="MATH101", required_sessions=2, teacher_id="t1", year=1)
    ]

    entries = generate_timetable(teachers, classrooms, courses, settings=seeded_settings).entries

    assert len(entries) == 2
    for entry in entries:
        assert entry.course_id == "crs1"
        assert entry.teacher_id == "t1"
        assert entry.classroom_id == "c1"
        assert entry.year == 1
        assert entry.batch is None
        assert not entry.is_lab_session
    assert len({entry.id for entry in entries}) == 2
    assert _validate(entries, teachers, classrooms, courses) == []


def test_two_batches_sharing_one_lab_room_go_on_different_days(seeded_settings):
    teachers = [Teacher(id="t2", name="Prof. John Davis")]
    classrooms = [
        Classroom(id="c1", name="A101", capacity=60, year_assigned=1),
        Classroom(id="l1", name="L101", capacity=30, is_lab=True, year_assigned=1),
    ]
    courses = [
        Course(
            id="crs2",
            name="Programming Fundamentals",
            subject_code="CS101",
            required_sessions=3,
            requires_lab=True,
            teacher_id="t2",
            year=1,
            batches=["A", "B"],
        )
    ]

    entries = generate_timetable(teachers, classrooms, courses, settings=seeded_settings).entries

    assert len(entries) == 4
    assert all(entry.is_lab_session and entry.classroom_id == "l1" for entry in entries)
    days = {entry.batch: entry.day_of_week for entry in entries}
    assert set(days) == {"A", "B"}
    assert days["A"] != days["B"]
    assert _validate(entries, teachers, classrooms, courses) == []
    assert find_shortfalls(entries, courses) == []


def test_lab_course_without_lab_rooms_gets_nothing(seeded_settings, caplog):
    caplog.set_level(logging.WARNING)
    teachers = [Teacher(id="t2", name="Prof. John Davis")]
    classrooms = [Classroom(id="c1", name="A101", capacity=60)]
    courses = [
        Course(
            id="crs2",
            name="Programming Fundamentals",
            subject_code="CS101",
            requires_lab=True,
            teacher_id="t2",
            year=1,
            batches=["A", "B", "C"],
        )
    ]

    entries = generate_timetable(teachers, classrooms, courses, settings=seeded_settings).entries

    assert entries == []
    assert "No labs available for year 1" in caplog.text
    shortfalls = find_shortfalls(entries, courses)
    assert [(s.course_id, s.batch, s.missing) for s in shortfalls] == [
        ("crs2", "A", 1),
        ("crs2", "B", 1),
        ("crs2", "C", 1),
    ]


def test_lab_course_without_batches_is_taught_as_lectures(seeded_settings):
    teachers = [Teacher(id="t2", name="Prof. John Davis")]
    classrooms = [
        Classroom(id="c1", name="A101", capacity=60),
        Classroom(id="l1", name="L101", capacity=30, is_lab=True),
    ]
    courses = [
        Course(
            id="crs2",
            name="Programming Fundamentals",
            subject_code="CS101",
            required_sessions=2,
            requires_lab=True,
            teacher_id="t2",
            year=1,
        )
    ]

    entries = generate_timetable(teachers, classrooms, courses, settings=seeded_settings).entries

    assert len(entries) == 2
    assert all(entry.is_whole_year and entry.classroom_id == "c1" for entry in entries)


def test_courses_without_year_or_rooms_are_skipped(seeded_settings, caplog):
    caplog.set_level(logging.WARNING)
    teachers = [Teacher(id="t1", name="Dr. Jane Smith")]
    classrooms = [Classroom(id="c1", name="A101", capacity=60, year_assigned=1)]
    courses = [
        Course(id="crs1", name="Calculus I", subject_code="MATH101", required_sessions=2, teacher_id="t1"),
        Course(id="crs5", name="Linear Algebra", subject_code="MATH201", required_sessions=2, teacher_id="t1", year=2),
    ]

    entries = generate_timetable(teachers, classrooms, courses, settings=seeded_settings).entries

    assert entries == []
    assert "Course Calculus I has no year assignment, skipping" in caplog.text
    assert "No classrooms assigned for year 2" in caplog.text
    assert "No timetable entries were generated" in caplog.text


def test_unknown_teacher_leaves_course_unscheduled(seeded_settings):
    classrooms = [Classroom(id="c1", name="A101", capacity=60)]
    courses = [
        Course(id="crs1", name="Calculus I", subject_code="MATH101", required_sessions=2, teacher_id="ghost", year=1)
    ]

    entries = generate_timetable([], classrooms, courses, settings=seeded_settings).entries

    assert entries == []


def test_same_seed_reproduces_the_same_timetable(department):
    teachers, classrooms, courses = department
    settings = GenerationSettings(random_seed=42)

    first = generate_timetable(teachers, classrooms, courses, settings=settings).entries
    second = generate_timetable(teachers, classrooms, courses, settings=settings).entries

    assert first == second


def test_years_are_scheduled_in_ascending_order(department):
    teachers, classrooms, courses = department

    entries = generate_timetable(
        teachers, classrooms, list(reversed(courses)), settings=GenerationSettings(random_seed=3)
    ).entries

    years = [entry.year for entry in entries]
    assert years == sorted(years)
    # Labs come before lectures within a year.
    year_one = [entry for entry in entries if entry.year == 1]
    first_lecture = next(index for index, entry in enumerate(year_one) if not entry.is_lab_session)
    assert all(entry.is_lab_session for entry in year_one[:first_lecture])
    assert not any(entry.is_lab_session for entry in year_one[first_lecture:])


@pytest.mark.parametrize("seed", range(12))
def test_generated_timetables_always_validate(department, seed):
    teachers, classrooms, courses = department
    settings = GenerationSettings(random_seed=seed)

    entries = generate_timetable(teachers, classrooms, courses, settings=settings).entries

    assert entries
    assert _validate(entries, teachers, classrooms, courses) == []
    teacher_ids = {teacher.id for teacher in teachers}
    room_years = {room.id: room.year_assigned for room in classrooms}
    for entry in entries:
        assert entry.teacher_id in teacher_ids
        assert room_years[entry.classroom_id] in (None, entry.year)
        if entry.is_lab_session:
            assert entry.batch is not None
    assert len({entry.id for entry in entries}) == len(entries)
