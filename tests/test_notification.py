"""
tests/test_notification.py

Tests for the notifier stub and the preference store.
"""

from datetime import datetime

import pytest

from alerting.schemas import (
    AlertPreferences,
    AlertRequest,
    GlucoseUnit,
    ThrottleCategory,
)
from alerting.services.notification import send_alert
from alerting.services.preferences import PreferenceStore
from config import Settings


@pytest.mark.asyncio
async def test_send_alert_completes_for_dedupe_request() -> None:
    request = AlertRequest(
        category=ThrottleCategory.CALIBRATION,
        title="Extracting calibrationdata from sensor",
        body="Calibrating",
        play_sound=True,
        dedupe=True,
    )
    assert await send_alert(request) is None


def test_snooze_and_unsnooze_keep_other_preferences() -> None:
    store = PreferenceStore(AlertPreferences(notify_every_x_times=4))
    until = datetime(2024, 6, 16, 1, 0).astimezone()

    state = store.snooze(until)

    assert state.active is True
    assert store.get().snooze.expires_at == until
    assert store.get().notify_every_x_times == 4

    store.unsnooze()
    assert store.get().snooze.active is False


def test_preferences_from_settings() -> None:
    config = Settings(
        glucose_unit="mmol/L",
        notify_every_x_times=5,
        alarm_schedule=[
            {"start": "22:00:00", "end": "06:00:00", "low_threshold": 70.0}
        ],
    )

    prefs = AlertPreferences.from_settings(config)

    assert prefs.glucose_unit == GlucoseUnit.MMOLL.value
    assert prefs.notify_every_x_times == 5
    assert prefs.alarm_schedule.windows[0].high_threshold is None


def test_naive_snooze_expiry_is_localized() -> None:
    store = PreferenceStore()
    state = store.snooze(datetime(2024, 6, 16, 1, 0))

    assert state.expires_at.tzinfo is not None
    assert state.expires_at.hour == 1
