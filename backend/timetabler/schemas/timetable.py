from __future__ import annotations

import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

Day = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
Batch = Literal["A", "B", "C", "D", "E", "F"]

DAYS_OF_WEEK: tuple[Day, ...] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
BATCH_VALUES: tuple[Batch, ...] = ("A", "B", "C", "D", "E", "F")

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class TimeSlot(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    is_break: bool = Field(default=False, alias="isBreak")
    is_lab_session: bool = Field(default=False, alias="isLabSession")
    display_name: str | None = Field(default=None, alias="displayName", max_length=50)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_time_order(self) -> "TimeSlot":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("End time must be after start time")
        return self


# Weekly layout of the department: seven teaching hours around two recesses.
DEFAULT_TIME_SLOTS: tuple[TimeSlot, ...] = (
    TimeSlot(id="slot1", start_time="09:00", end_time="10:00", display_name="1"),
    TimeSlot(id="slot2", start_time="10:00", end_time="11:00", display_name="2"),
    TimeSlot(id="slot3", start_time="11:00", end_time="12:00", display_name="3"),
    TimeSlot(id="recess1", start_time="12:00", end_time="12:45", is_break=True, display_name="Recess"),
    TimeSlot(id="slot4", start_time="12:45", end_time="13:45", display_name="4"),
    TimeSlot(id="slot5", start_time="13:45", end_time="14:45", display_name="5"),
    TimeSlot(id="slot6", start_time="14:45", end_time="15:45", display_name="6"),
    TimeSlot(id="recess2", start_time="15:45", end_time="16:00", is_break=True, display_name="Recess"),
    TimeSlot(id="slot7", start_time="16:00", end_time="17:00", display_name="7"),
)


class Teacher(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    subjects: list[str] = Field(default_factory=list)
    max_consecutive_lectures: int | None = Field(default=None, alias="maxConsecutiveLectures", ge=1, le=12)
    # Preference only; the generator does not filter on it.
    year_assigned: int | None = Field(default=None, alias="yearAssigned", ge=1, le=4)

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }


class Classroom(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(default=0, ge=0, le=1000)
    is_lab: bool = Field(default=False, alias="isLab")
    year_assigned: int | None = Field(default=None, alias="yearAssigned", ge=1, le=4)

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    def serves_year(self, year: int) -> bool:
        return self.year_assigned is None or self.year_assigned == year


class Course(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    subject_code: str = Field(min_length=1, max_length=50, alias="subjectCode")
    required_sessions: int = Field(default=0, alias="requiredSessions", ge=0, le=40)
    requires_lab: bool = Field(default=False, alias="requiresLab")
    teacher_id: str = Field(min_length=1, max_length=36, alias="teacherId")
    year: int | None = Field(default=None, ge=1, le=4)
    batches: list[Batch] | None = None

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @property
    def has_lab_batches(self) -> bool:
        return self.requires_lab and bool(self.batches)

    def lab_batches(self) -> list[Batch]:
        if not self.has_lab_batches:
            return []
        return list(dict.fromkeys(self.batches))


class ScheduleEntry(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    day_of_week: Day = Field(alias="dayOfWeek")
    time_slot_id: str = Field(min_length=1, max_length=36, alias="timeSlotId")
    course_id: str = Field(min_length=1, max_length=36, alias="courseId")
    teacher_id: str = Field(min_length=1, max_length=36, alias="teacherId")
    classroom_id: str = Field(min_length=1, max_length=36, alias="classroomId")
    batch: Batch | None = None
    is_lab_session: bool = Field(default=False, alias="isLabSession")
    year: int | None = Field(default=None, ge=1, le=4)

    model_config = {
        "populate_by_name": True,
        "frozen": True,
    }

    @property
    def is_whole_year(self) -> bool:
        return self.batch is None and not self.is_lab_session


class Timetable(BaseModel):
    entries: list[ScheduleEntry] = Field(default_factory=list)


class ViolationType(str, Enum):
    classroom_conflict = "CLASSROOM_CONFLICT"
    teacher_conflict = "TEACHER_CONFLICT"
    break_time_conflict = "BREAK_TIME_CONFLICT"
    consecutive_lecture_conflict = "CONSECUTIVE_LECTURE_CONFLICT"
    batch_lab_conflict = "BATCH_LAB_CONFLICT"
    day_lab_limit_conflict = "DAY_LAB_LIMIT_CONFLICT"
    same_course_lab_conflict = "SAME_COURSE_LAB_CONFLICT"
    lab_batch_room_conflict = "LAB_BATCH_ROOM_CONFLICT"
    lab_lecture_overlap_conflict = "LAB_LECTURE_OVERLAP_CONFLICT"
    year_lecture_conflict = "YEAR_LECTURE_CONFLICT"
    lab_double_period_conflict = "LAB_DOUBLE_PERIOD_CONFLICT"


class ValidationError(BaseModel):
    """One kind of violation found in a schedule, with every entry involved."""

    type: ViolationType
    message: str
    affected_entries: list[ScheduleEntry] = Field(default_factory=list, alias="affectedEntries")

    model_config = {
        "populate_by_name": True,
    }
