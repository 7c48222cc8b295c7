from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from timetabler.core.config import Settings
from timetabler.schemas.timetable import (
    DAYS_OF_WEEK,
    DEFAULT_TIME_SLOTS,
    Batch,
    Classroom,
    Course,
    Day,
    ScheduleEntry,
    Teacher,
    TimeSlot,
    ValidationError,
)

MAX_RANDOM_SEED = 2_000_000_000


class GenerationSettings(BaseModel):
    lab_attempt_budget: int = Field(default=150, ge=1, le=10_000)
    lecture_attempt_budget: int = Field(default=100, ge=1, le=10_000)
    consecutive_lecture_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    max_batch_labs_per_day: int = Field(default=2, ge=1, le=12)
    lab_sessions_per_batch: int = Field(default=1, ge=1, le=6)
    default_max_consecutive_lectures: int = Field(default=2, ge=1, le=12)
    random_seed: int | None = Field(default=None, ge=0, le=MAX_RANDOM_SEED)
    days: list[Day] = Field(default_factory=lambda: list(DAYS_OF_WEEK), min_length=1)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[Day]) -> list[Day]:
        if len(set(value)) != len(value):
            raise ValueError("days must not contain duplicates")
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationSettings":
        return cls(
            lab_attempt_budget=settings.lab_attempt_budget,
            lecture_attempt_budget=settings.lecture_attempt_budget,
            consecutive_lecture_probability=settings.consecutive_lecture_probability,
            max_batch_labs_per_day=settings.max_batch_labs_per_day,
            lab_sessions_per_batch=settings.lab_sessions_per_batch,
            default_max_consecutive_lectures=settings.default_max_consecutive_lectures,
            random_seed=settings.random_seed,
            days=settings.working_days,
        )


class CourseShortfall(BaseModel):
    course_id: str = Field(alias="courseId")
    batch: Batch | None = None
    expected: int
    scheduled: int

    model_config = {
        "populate_by_name": True,
    }

    @property
    def missing(self) -> int:
        return max(0, self.expected - self.scheduled)


class TeacherLoad(BaseModel):
    teacher_id: str = Field(alias="teacherId")
    teacher_name: str | None = Field(default=None, alias="teacherName")
    lecture_slots: int = Field(default=0, alias="lectureSlots")
    lab_slots: int = Field(default=0, alias="labSlots")

    model_config = {
        "populate_by_name": True,
    }

    @property
    def total_slots(self) -> int:
        return self.lecture_slots + self.lab_slots


def _ensure_unique(label: str, items: list[BaseModel]) -> None:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for item in items:
        if item.id in seen:
            duplicates.add(item.id)
        else:
            seen.add(item.id)
    if duplicates:
        raise ValueError(f"Duplicate {label} id(s): {', '.join(sorted(duplicates))}")


class GenerateTimetableRequest(BaseModel):
    teachers: list[Teacher] = Field(default_factory=list)
    classrooms: list[Classroom] = Field(default_factory=list)
    courses: list[Course] = Field(default_factory=list)
    time_slots: list[TimeSlot] = Field(default_factory=lambda: list(DEFAULT_TIME_SLOTS), alias="timeSlots")
    settings: GenerationSettings | None = None

    model_config = {
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "GenerateTimetableRequest":
        _ensure_unique("teacher", self.teachers)
        _ensure_unique("classroom", self.classrooms)
        _ensure_unique("course", self.courses)
        _ensure_unique("time slot", self.time_slots)
        return self


class GenerateTimetableResponse(BaseModel):
    entries: list[ScheduleEntry] = Field(default_factory=list)
    errors: list[ValidationError] = Field(default_factory=list)
    shortfalls: list[CourseShortfall] = Field(default_factory=list)
    teacher_loads: list[TeacherLoad] = Field(default_factory=list, alias="teacherLoads")
    random_seed: int | None = Field(default=None, alias="randomSeed")

    model_config = {
        "populate_by_name": True,
    }


class ValidateTimetableRequest(BaseModel):
    entries: list[ScheduleEntry] = Field(default_factory=list)
    teachers: list[Teacher] = Field(default_factory=list)
    classrooms: list[Classroom] = Field(default_factory=list)
    courses: list[Course] = Field(default_factory=list)
    time_slots: list[TimeSlot] = Field(default_factory=lambda: list(DEFAULT_TIME_SLOTS), alias="timeSlots")
    settings: GenerationSettings | None = None

    model_config = {
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "ValidateTimetableRequest":
        _ensure_unique("teacher", self.teachers)
        _ensure_unique("classroom", self.classrooms)
        _ensure_unique("course", self.courses)
        _ensure_unique("time slot", self.time_slots)
        return self


class ValidateTimetableResponse(BaseModel):
    valid: bool
    errors: list[ValidationError] = Field(default_factory=list)


class EntryListRequest(BaseModel):
    entries: list[ScheduleEntry] = Field(default_factory=list)
