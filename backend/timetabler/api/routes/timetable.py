from __future__ import annotations

import logging
import random

from fastapi import APIRouter

from timetabler.core.config import get_settings
from timetabler.schemas.generator import (
    MAX_RANDOM_SEED,
    EntryListRequest,
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    GenerationSettings,
    ValidateTimetableRequest,
    ValidateTimetableResponse,
)
from timetabler.schemas.timetable import Batch, ScheduleEntry
from timetabler.services.coverage import find_shortfalls, teacher_loads
from timetabler.services.filters import get_teacher_timetable, get_year_timetable
from timetabler.services.timetable_generator import TimetableGenerator
from timetabler.services.validator import validate_timetable

router = APIRouter()
logger = logging.getLogger(__name__)


def resolve_generation_settings(overrides: GenerationSettings | None) -> GenerationSettings:
    """Env-configured settings with only the fields the caller actually sent replaced."""
    settings = GenerationSettings.from_settings(get_settings())
    if overrides is None:
        return settings
    return settings.model_copy(update=overrides.model_dump(exclude_unset=True))


@router.post("/generate", response_model=GenerateTimetableResponse)
def generate(payload: GenerateTimetableRequest) -> GenerateTimetableResponse:
    settings = resolve_generation_settings(payload.settings)
    if settings.random_seed is None:
        # Echoed back so the caller can reproduce this run.
        settings = settings.model_copy(update={"random_seed": random.randint(0, MAX_RANDOM_SEED)})
        logger.debug("No random seed given, using %d", settings.random_seed)

    generator = TimetableGenerator(time_slots=payload.time_slots, settings=settings)
    timetable = generator.generate(payload.teachers, payload.classrooms, payload.courses)

    errors = validate_timetable(
        timetable.entries,
        payload.teachers,
        payload.classrooms,
        payload.courses,
        payload.time_slots,
        default_max_consecutive_lectures=settings.default_max_consecutive_lectures,
        max_batch_labs_per_day=settings.max_batch_labs_per_day,
    )
    shortfalls = find_shortfalls(
        timetable.entries,
        payload.courses,
        lab_sessions_per_batch=settings.lab_sessions_per_batch,
    )
    if errors or shortfalls:
        logger.info(
            "Generated timetable has %d violation kind(s) and %d shortfall(s)",
            len(errors),
            len(shortfalls),
        )
    return GenerateTimetableResponse(
        entries=timetable.entries,
        errors=errors,
        shortfalls=shortfalls,
        teacher_loads=teacher_loads(timetable.entries, payload.teachers),
        random_seed=settings.random_seed,
    )


@router.post("/validate", response_model=ValidateTimetableResponse)
def validate(payload: ValidateTimetableRequest) -> ValidateTimetableResponse:
    settings = resolve_generation_settings(payload.settings)
    errors = validate_timetable(
        payload.entries,
        payload.teachers,
        payload.classrooms,
        payload.courses,
        payload.time_slots,
        default_max_consecutive_lectures=settings.default_max_consecutive_lectures,
        max_batch_labs_per_day=settings.max_batch_labs_per_day,
    )
    return ValidateTimetableResponse(valid=not errors, errors=errors)


@router.post("/teacher/{teacher_id}", response_model=list[ScheduleEntry])
def teacher_timetable(teacher_id: str, payload: EntryListRequest) -> list[ScheduleEntry]:
    return get_teacher_timetable(payload.entries, teacher_id)


@router.post("/year/{year}", response_model=list[ScheduleEntry])
def year_timetable(year: int, payload: EntryListRequest, batch: Batch | None = None) -> list[ScheduleEntry]:
    return get_year_timetable(payload.entries, year, batch)
