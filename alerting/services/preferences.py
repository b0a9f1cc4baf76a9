"""
alerting/services/preferences.py

In-process store for the user's alert preferences.
The host application replaces the snapshot when the user edits settings;
the orchestrator reads one immutable snapshot per event.
"""

import threading
from datetime import datetime
from typing import Optional

import structlog

from alerting.schemas import AlertPreferences, SnoozeState

logger = structlog.get_logger(__name__)


class PreferenceStore:
    def __init__(self, preferences: Optional[AlertPreferences] = None) -> None:
        self._lock = threading.Lock()
        self._preferences = preferences or AlertPreferences()

    def get(self) -> AlertPreferences:
        with self._lock:
            return self._preferences

    def replace(self, preferences: AlertPreferences) -> None:
        with self._lock:
            self._preferences = preferences
        logger.info("preferences_replaced", glucose_unit=preferences.glucose_unit)

    def snooze(self, until: Optional[datetime] = None) -> SnoozeState:
        """Activate snooze until `until`, or indefinitely when None."""
        state = SnoozeState(active=True, expires_at=until)
        self._set_snooze(state)
        logger.info("alarms_snoozed", expires_at=str(until) if until else None)
        return state

    def unsnooze(self) -> None:
        self._set_snooze(SnoozeState())
        logger.info("alarms_unsnoozed")

    def _set_snooze(self, state: SnoozeState) -> None:
        with self._lock:
            self._preferences = self._preferences.model_copy(
                update={"snooze": state}
            )
