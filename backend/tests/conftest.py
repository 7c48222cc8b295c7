import pytest
from fastapi.testclient import TestClient #fake http client that calls the FastAPI routes without running a real server.

from timetabler.main import app
from timetabler.schemas.generator import GenerationSettings
from timetabler.schemas.timetable import DEFAULT_TIME_SLOTS, Classroom, Course, ScheduleEntry, Teacher


@pytest.fixture() #test client
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def time_slots():
    return list(DEFAULT_TIME_SLOTS)


@pytest.fixture()
def seeded_settings():
    return GenerationSettings(random_seed=7)


@pytest.fixture()
def make_entry():
    """Builds schedule entries with sensible defaults; override any field by keyword."""
    counter = {"value": 0}

    def factory(**overrides):
        counter["value"] += 1
        fields = {
            "id": f"e{counter['value']}",
            "day_of_week": "Monday",
            "time_slot_id": "slot1",
            "course_id": "crs1",
            "teacher_id": "t1",
            "classroom_id": "c1",
            "year": 1,
        }
        fields.update(overrides)
        return ScheduleEntry(**fields)

    return factory


@pytest.fixture()
def department():
    """A small two-year department with shared and year-bound rooms."""
    teachers = [
        Teacher(id="t1", name="Dr. Jane Smith", subjects=["Mathematics"], max_consecutive_lectures=2),
        Teacher(id="t2", name="Prof. John Davis", subjects=["Programming"], max_consecutive_lectures=3),
        Teacher(id="t3", name="Dr. Robert Johnson", subjects=["Physics"]),
        Teacher(id="t4", name="Prof. Emily White", subjects=["Chemistry"], max_consecutive_lectures=2),
    ]
    classrooms = [
        Classroom(id="c1", name="A101", capacity=60, is_lab=False, year_assigned=1),
        Classroom(id="c2", name="A102", capacity=40, is_lab=False, year_assigned=2),
        Classroom(id="c3", name="B201", capacity=30, is_lab=False),
        Classroom(id="c4", name="L101", capacity=30, is_lab=True),
        Classroom(id="c5", name="L102", capacity=25, is_lab=True, year_assigned=1),
    ]
    courses = [
        Course(id="crs1", name="Calculus I", subject_code="MATH101", required_sessions=4, teacher_id="t1", year=1),
        Course(
            id="crs2",
            name="Programming Fundamentals",
            subject_code="CS101",
            required_sessions=3,
            requires_lab=True,
            teacher_id="t2",
            year=1,
            batches=["A", "B", "C"],
        ),
        Course(id="crs3", name="Physics I", subject_code="PHY101", required_sessions=3, teacher_id="t3", year=1),
        Course(
            id="crs4",
            name="Chemistry II",
            subject_code="CHE201",
            required_sessions=2,
            requires_lab=True,
            teacher_id="t4",
            year=2,
            batches=["A", "B"],
        ),
        Course(id="crs5", name="Linear Algebra", subject_code="MATH201", required_sessions=3, teacher_id="t1", year=2),
    ]
    return teachers, classrooms, courses
