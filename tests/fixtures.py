"""
tests/fixtures.py

Shared test data and helper functions for constructing engine inputs.
All tests must use these fixtures instead of hardcoding test values.
"""

from datetime import datetime, time, timedelta
from typing import Optional

from alerting.schemas import (
    AlarmSchedule,
    AlarmWindow,
    AlertPreferences,
    GlucoseReading,
    GlucoseTrend,
    SensorReading,
    SensorState,
    SnoozeState,
    TransmitterReading,
)
from alerting.services.orchestrator import AlertOrchestrator

# ── Reference instants ──────────────────────────────────────

# Aware, in the local zone, like the engine's default clock
NIGHT: datetime = datetime(2024, 6, 15, 23, 0, 0).astimezone()
NOON: datetime = datetime(2024, 6, 15, 12, 0, 0).astimezone()

# ── Night alarm window ──────────────────────────────────────

NIGHT_LOW: float = 70.0
NIGHT_HIGH: float = 200.0


def build_night_schedule(
    low: Optional[float] = NIGHT_LOW,
    high: Optional[float] = NIGHT_HIGH,
) -> AlarmSchedule:
    """A single 22:00–06:00 window."""
    return AlarmSchedule(
        windows=[
            AlarmWindow(
                start=time(22, 0),
                end=time(6, 0),
                low_threshold=low,
                high_threshold=high,
            )
        ]
    )


def build_reading(
    value: float = 120.0,
    timestamp: datetime | None = None,
    trend: GlucoseTrend | None = None,
) -> GlucoseReading:
    return GlucoseReading(value=value, timestamp=timestamp or NIGHT, trend=trend)


def build_preferences(**overrides) -> AlertPreferences:
    """AlertPreferences with the night schedule and sensible defaults."""
    values = {
        "glucose_unit": "mg/dL",
        "alarm_schedule": build_night_schedule(),
        "snooze": SnoozeState(),
        "always_display_glucose": False,
        "notify_every_x_times": 3,
    }
    values.update(overrides)
    return AlertPreferences(**values)


def build_transmitter(battery: int = 15, name: str = "MiaoMiao") -> TransmitterReading:
    return TransmitterReading(name=name, battery=battery)


def build_sensor(
    minutes_since_start: int = 20_000,
    state: SensorState = SensorState.READY,
    is_likely_libre1: bool = True,
    has_valid_crcs: bool = True,
) -> SensorReading:
    return SensorReading(
        minutes_since_start=minutes_since_start,
        state=state,
        is_likely_libre1=is_likely_libre1,
        has_valid_crcs=has_valid_crcs,
    )


class FakeClock:
    """Manually advanced clock for deterministic cooldown tests."""

    def __init__(self, now: datetime = NIGHT) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def build_orchestrator(
    preferences: AlertPreferences | None = None,
    clock: FakeClock | None = None,
    can_notify=lambda: True,
    notifier=None,
) -> AlertOrchestrator:
    prefs = preferences or build_preferences()
    return AlertOrchestrator(
        preferences=lambda: prefs,
        can_notify=can_notify,
        notifier=notifier,
        clock=clock or FakeClock(),
    )
