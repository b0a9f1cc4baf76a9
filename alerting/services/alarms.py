"""
alerting/services/alarms.py

Alarm classification of a glucose value against the user's alarm schedule.
Pure functions: no clock reads, no state.
"""

from datetime import datetime

from alerting.schemas import AlarmDecision, AlarmSchedule, SnoozeState


def classify(value: float, at: datetime, schedule: AlarmSchedule) -> AlarmDecision:
    """
    Classify a glucose value against the window active at `at`.

    Thresholds are inclusive; a threshold of None is disabled. The first
    window in schedule order that contains the time of day wins, so
    overlapping windows resolve deterministically.
    """
    window = schedule.active_window(at)
    if window is None:
        return AlarmDecision.NONE

    if window.high_threshold is not None and value >= window.high_threshold:
        return AlarmDecision.HIGH
    if window.low_threshold is not None and value <= window.low_threshold:
        return AlarmDecision.LOW
    return AlarmDecision.NONE


def evaluate(
    value: float,
    at: datetime,
    schedule: AlarmSchedule,
    snooze: SnoozeState,
) -> tuple[AlarmDecision, bool]:
    """
    Return the alarm decision and whether alarms are snoozed at `at`.

    A snoozed alarm still reports its decision; only the side effects
    (sound, vibration) are suppressed downstream.
    """
    return classify(value, at, schedule), snooze.is_snoozed(at)
