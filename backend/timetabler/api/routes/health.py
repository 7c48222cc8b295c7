from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from timetabler.core.config import get_settings
from timetabler.schemas.timetable import DEFAULT_TIME_SLOTS
from timetabler.services.slot_layout import SlotLayout

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/health/ready")
def health_ready() -> dict:
    settings = get_settings()
    layout = SlotLayout(DEFAULT_TIME_SLOTS)
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "scheduler": {
            "working_days": settings.working_days,
            "teaching_slots": len(layout.teaching_slots),
            "double_periods": len(layout.double_periods()),
            "random_seed": settings.random_seed,
        },
    }
