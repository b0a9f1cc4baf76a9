"""
alerting/routers/preferences.py

Read/replace the user's alert preferences and toggle alarm snooze.
"""

from datetime import timedelta
from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from alerting.dependencies import get_preference_store
from alerting.schemas import (
    AlertPreferences,
    SnoozeRequest,
    SnoozeState,
    local_now,
)
from alerting.services.preferences import PreferenceStore
from config import settings

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["preferences"])


@router.get("/preferences")
async def read_preferences(
    store: PreferenceStore = Depends(get_preference_store),
) -> AlertPreferences:
    return store.get()


@router.put("/preferences")
async def replace_preferences(
    preferences: AlertPreferences,
    store: PreferenceStore = Depends(get_preference_store),
) -> AlertPreferences:
    store.replace(preferences)
    return store.get()


@router.post("/snooze")
async def snooze_alarms(
    request: Optional[SnoozeRequest] = None,
    store: PreferenceStore = Depends(get_preference_store),
) -> SnoozeState:
    minutes = settings.default_snooze_minutes
    if request is not None and request.minutes is not None:
        minutes = request.minutes
    return store.snooze(until=local_now() + timedelta(minutes=minutes))


@router.delete("/snooze")
async def clear_snooze(
    store: PreferenceStore = Depends(get_preference_store),
) -> SnoozeState:
    store.unsnooze()
    return store.get().snooze
