"""
alerting/schemas.py

Pydantic data models and enums for the alert engine.
- GlucoseReading / TransmitterReading / SensorReading: incoming events
- AlarmWindow / AlarmSchedule / SnoozeState: user alarm configuration
- AlertPreferences: snapshot of the user's alert settings
- AlertRequest: message handed to the external notifier
"""

from datetime import datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def local_now() -> datetime:
    """Current wall-clock time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


def as_local(value: datetime) -> datetime:
    """Attach the local zone to naive datetimes; aware values pass through."""
    if value.tzinfo is None:
        return value.astimezone()
    return value


class GlucoseUnit(str, Enum):
    MGDL = "mg/dL"
    MMOLL = "mmol/L"


class GlucoseTrend(str, Enum):
    """CGM trend direction reported alongside a reading."""

    UP_UP_UP = "upUpUp"
    UP_UP = "upUp"
    UP = "up"
    FLAT = "flat"
    DOWN = "down"
    DOWN_DOWN = "downDown"
    DOWN_DOWN_DOWN = "downDownDown"

    @property
    def label(self) -> str:
        return _TREND_LABELS[self]


_TREND_LABELS = {
    GlucoseTrend.UP_UP_UP: "Rising very fast",
    GlucoseTrend.UP_UP: "Rising fast",
    GlucoseTrend.UP: "Rising",
    GlucoseTrend.FLAT: "Flat",
    GlucoseTrend.DOWN: "Falling",
    GlucoseTrend.DOWN_DOWN: "Falling fast",
    GlucoseTrend.DOWN_DOWN_DOWN: "Falling very fast",
}


class AlarmDecision(str, Enum):
    NONE = "none"
    LOW = "low"
    HIGH = "high"

    @property
    def is_alarming(self) -> bool:
        return self is not AlarmDecision.NONE


class ThrottleCategory(str, Enum):
    """Alert categories; each owns independent throttle state."""

    GLUCOSE_PERIODIC = "glucose_periodic"
    LOW_BATTERY = "low_battery"
    SENSOR_EXPIRING = "sensor_expiring"
    NO_SENSOR_DETECTED = "no_sensor_detected"
    SENSOR_CHANGED = "sensor_changed"
    INVALID_SENSOR = "invalid_sensor"
    INVALID_CHECKSUM = "invalid_checksum"
    BLUETOOTH_OFF = "bluetooth_off"
    NO_TRANSMITTER_SELECTED = "no_transmitter_selected"
    CALIBRATION = "calibration"


class SensorState(str, Enum):
    NOT_YET_STARTED = "notYetStarted"
    STARTING = "starting"
    READY = "ready"
    EXPIRED = "expired"
    SHUTDOWN = "shutdown"
    FAILURE = "failure"
    UNKNOWN = "unknown"


# ── Incoming events ──────────────────────────────────────────


class GlucoseReading(BaseModel):
    """A single CGM reading, value in mg/dL."""

    model_config = ConfigDict(frozen=True)

    value: float
    timestamp: datetime
    trend: Optional[GlucoseTrend] = None

    @field_validator("timestamp")
    @classmethod
    def localize_timestamp(cls, value: datetime) -> datetime:
        return as_local(value)


class TransmitterReading(BaseModel):
    """Battery report from the transmitter bridge."""

    model_config = ConfigDict(frozen=True)

    name: str
    battery: int  # percent

    @property
    def battery_label(self) -> str:
        return f"{self.battery}%"


class SensorReading(BaseModel):
    """Sensor status decoded from a transmitter packet."""

    model_config = ConfigDict(frozen=True)

    minutes_since_start: int
    state: SensorState = SensorState.READY
    is_likely_libre1: bool = True
    has_valid_crcs: bool = True

    @property
    def is_valid(self) -> bool:
        return self.is_likely_libre1 and self.state in (
            SensorState.STARTING,
            SensorState.READY,
        )

    @property
    def human_readable_age(self) -> str:
        days, remainder = divmod(self.minutes_since_start, 60 * 24)
        hours = remainder // 60
        return f"{days} day(s) and {hours} hour(s)"


# ── Alarm configuration ──────────────────────────────────────


class AlarmWindow(BaseModel):
    """
    A time-of-day window with its own low/high thresholds.

    The window covers [start, end). When start > end the window wraps past
    midnight; when start == end it covers nothing.
    """

    model_config = ConfigDict(frozen=True)

    start: time
    end: time
    low_threshold: Optional[float] = None  # None disables the low alarm
    high_threshold: Optional[float] = None  # None disables the high alarm

    def contains(self, moment: time) -> bool:
        if self.start < self.end:
            return self.start <= moment < self.end
        if self.start > self.end:
            return moment >= self.start or moment < self.end
        return False


class AlarmSchedule(BaseModel):
    """Ordered alarm windows; the first window containing a time is active."""

    model_config = ConfigDict(frozen=True)

    windows: list[AlarmWindow] = Field(default_factory=list)

    def active_window(self, at: datetime) -> Optional[AlarmWindow]:
        moment = at.time()
        for window in self.windows:
            if window.contains(moment):
                return window
        return None


class SnoozeState(BaseModel):
    model_config = ConfigDict(frozen=True)

    active: bool = False
    expires_at: Optional[datetime] = None

    def is_snoozed(self, at: datetime) -> bool:
        if not self.active:
            return False
        return self.expires_at is None or self.expires_at > as_local(at)

    @field_validator("expires_at")
    @classmethod
    def localize_expiry(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_local(value) if value is not None else None


class AlertPreferences(BaseModel):
    """Snapshot of the user's alert configuration for one evaluation."""

    model_config = ConfigDict(frozen=True)

    glucose_unit: str = GlucoseUnit.MGDL.value
    alarm_schedule: AlarmSchedule = Field(default_factory=AlarmSchedule)
    snooze: SnoozeState = Field(default_factory=SnoozeState)
    always_display_glucose: bool = False
    notify_every_x_times: int = 0
    alert_low_battery: bool = True
    alert_will_soon_expire: bool = True
    alert_no_sensor_detected: bool = True
    alert_new_sensor_detected: bool = True
    alert_invalid_sensor_detected: bool = True
    vibrate_on_alarm: bool = True
    danger_mode: bool = False

    @classmethod
    def from_settings(cls, settings) -> "AlertPreferences":
        """Build the initial preference snapshot from config.Settings."""
        return cls(
            glucose_unit=settings.glucose_unit,
            alarm_schedule=AlarmSchedule(windows=settings.alarm_schedule),
            always_display_glucose=settings.always_display_glucose,
            notify_every_x_times=settings.notify_every_x_times,
            alert_low_battery=settings.alert_low_battery,
            alert_will_soon_expire=settings.alert_will_soon_expire,
            alert_no_sensor_detected=settings.alert_no_sensor_detected,
            alert_new_sensor_detected=settings.alert_new_sensor_detected,
            alert_invalid_sensor_detected=settings.alert_invalid_sensor_detected,
            vibrate_on_alarm=settings.vibrate_on_alarm,
            danger_mode=settings.danger_mode,
        )


# ── Output ───────────────────────────────────────────────────


class AlertRequest(BaseModel):
    """Alert handed to the external notifier."""

    model_config = ConfigDict(frozen=True)

    category: ThrottleCategory
    title: str
    body: str
    play_sound: bool = False
    should_vibrate: bool = False
    dedupe: bool = False  # clear pending/delivered alerts of this category first


# ── API payloads ─────────────────────────────────────────────


class GlucoseEvent(BaseModel):
    reading: GlucoseReading
    previous: Optional[GlucoseReading] = None


class NoSensorEvent(BaseModel):
    device_name: str
    no_sensor: bool = True


class CalibrationEvent(BaseModel):
    message: str


class SnoozeRequest(BaseModel):
    minutes: Optional[int] = None  # defaults to settings.default_snooze_minutes


class AlertResponse(BaseModel):
    status: str = "received"
    alert: Optional[AlertRequest] = None


class AlertListResponse(BaseModel):
    status: str = "received"
    alerts: list[AlertRequest] = Field(default_factory=list)
