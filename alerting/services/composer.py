"""
alerting/services/composer.py

Builds user-facing alert titles and bodies.
- compose_glucose_message: severity title, delta and trend for a reading
- compose_*: fixed texts for device-health categories
- vibrate: bounded pulse pattern the host plays when an AlertRequest has
  should_vibrate set
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from alerting.constants import (
    TITLE_GLUCOSE,
    TITLE_HIGH_ALERT,
    TITLE_LOW_ALERT,
    TITLE_SNOOZED,
    VIBRATION_PULSE_INTERVAL_S,
)
from alerting.schemas import AlarmDecision, SensorReading, TransmitterReading
from alerting.services.units import UnitFormatter
from config import settings

logger = structlog.get_logger(__name__)

_SEVERITY_TITLES = {
    AlarmDecision.NONE: TITLE_GLUCOSE,
    AlarmDecision.LOW: TITLE_LOW_ALERT,
    AlarmDecision.HIGH: TITLE_HIGH_ALERT,
}


@dataclass(frozen=True)
class ComposedMessage:
    title: str
    body: str
    play_sound: bool = False
    should_vibrate: bool = False


def compose_glucose_message(
    decision: AlarmDecision,
    current: float,
    formatter: UnitFormatter,
    previous: Optional[float] = None,
    trend_label: Optional[str] = None,
    is_snoozed: bool = False,
    vibrate_on_alarm: bool = True,
) -> ComposedMessage:
    """
    Compose the glucose alert for a classified reading.

    Title: severity, "(Snoozed)" when snoozed, formatted value.
    Body: "Glucose: <value>", then the signed delta to `previous` when given,
    then the trend label when given.
    """
    formatted = formatter.format(current)

    titles = [_SEVERITY_TITLES[decision]]
    if is_snoozed:
        titles.append(TITLE_SNOOZED)
    titles.append(formatted)

    body = f"Glucose: {formatted}"
    if previous is not None:
        body += ", " + _format_delta(current - previous, formatter)
    if trend_label:
        body += f", {trend_label}"

    audible = decision.is_alarming and not is_snoozed
    return ComposedMessage(
        title=" ".join(titles),
        body=body,
        play_sound=audible,
        should_vibrate=audible and vibrate_on_alarm,
    )


def _format_delta(diff: float, formatter: UnitFormatter) -> str:
    sign = "-" if diff < 0 else "+"
    if diff == 0:
        return f"{sign} 0"
    return sign + formatter.format(abs(diff))


# ── Device-health messages ───────────────────────────────────


def compose_low_battery(transmitter: TransmitterReading) -> ComposedMessage:
    return ComposedMessage(
        title="Low Battery",
        body=(
            f"Battery is running low ({transmitter.battery_label}), consider "
            f"charging your {transmitter.name} device as soon as possible"
        ),
        play_sound=True,
    )


def compose_sensor_expiring(sensor: SensorReading) -> ComposedMessage:
    return ComposedMessage(
        title="Sensor Ending Soon",
        body=(
            "Current Sensor is Ending soon! "
            f"Sensor Age: {sensor.human_readable_age}"
        ),
    )


def compose_no_sensor_detected(device_name: str) -> ComposedMessage:
    return ComposedMessage(
        title="No Sensor Detected",
        body=(
            "This might be an intermittent problem, but please check that "
            f"your {device_name} is tightly secured over your sensor"
        ),
    )


def compose_sensor_changed() -> ComposedMessage:
    return ComposedMessage(
        title="New Sensor Detected",
        body="Please wait up to 30 minutes before glucose readings are available!",
    )


def compose_invalid_sensor(sensor: SensorReading) -> ComposedMessage:
    if not sensor.is_likely_libre1:
        body = "Detected sensor seems not to be a libre 1 sensor!"
    else:
        body = f"Detected sensor is invalid: {sensor.state.value}"
    return ComposedMessage(
        title="Invalid Sensor Detected", body=body, play_sound=True
    )


def compose_invalid_checksum() -> ComposedMessage:
    return ComposedMessage(
        title="Invalid libre checksum",
        body="Libre sensor was incorrectly read, CRCs were not valid",
    )


def compose_bluetooth_off() -> ComposedMessage:
    return ComposedMessage(
        title="Bluetooth Power Off", body="Please turn on Bluetooth"
    )


def compose_no_transmitter_selected() -> ComposedMessage:
    return ComposedMessage(
        title="No Libre Transmitter Selected",
        body=(
            "Delete CGMManager and start anew. "
            "Your libreoopweb credentials will be preserved"
        ),
    )


def compose_calibration(message: str) -> ComposedMessage:
    return ComposedMessage(
        title="Extracting calibrationdata from sensor",
        body=message,
        play_sound=True,
    )


# ── Vibration ────────────────────────────────────────────────


def vibrate(
    pulse: Callable[[], None],
    times: int = settings.vibration_pulses,
    interval: float = VIBRATION_PULSE_INTERVAL_S,
) -> int:
    """
    Play `times` vibration pulses one after another.

    `pulse` blocks until its vibration completes, so each pulse starts only
    after the previous one finished. Returns the number of pulses played.
    """
    played = 0
    for remaining in range(times, 0, -1):
        pulse()
        played += 1
        if remaining > 1 and interval > 0:
            time.sleep(interval)
    logger.debug("vibration_pattern_played", pulses=played)
    return played
