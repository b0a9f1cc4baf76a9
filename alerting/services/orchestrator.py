"""
alerting/services/orchestrator.py

Entry point invoked once per incoming event.
Each on_* method evaluates one event and returns the AlertRequest it emitted,
or None when the event was gated, throttled or could not be composed.

Order per event: precondition gate → permission check → throttler → composer.
Gates run before the throttler so cooldowns only advance for events that
qualified, and a denied permission returns before any state is touched.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from alerting.errors import UnsupportedGlucoseUnitError
from alerting.schemas import (
    AlertPreferences,
    AlertRequest,
    GlucoseReading,
    SensorReading,
    ThrottleCategory,
    TransmitterReading,
    local_now,
)
from alerting.services import composer
from alerting.services.alarms import evaluate
from alerting.services.composer import ComposedMessage
from alerting.services.throttle import (
    EveryNthCall,
    FixedCooldown,
    NotificationThrottler,
    ThrottlePolicy,
    Unconditional,
)
from alerting.services.units import get_formatter
from config import Settings, settings

logger = structlog.get_logger(__name__)


def _always_permitted() -> bool:
    return True


class AlertOrchestrator:
    """
    Sequences alarm evaluation, throttling and message composition.

    Collaborators are injected so the engine stays deterministic:
    - preferences: returns the current AlertPreferences snapshot
    - can_notify: returns whether alerts may currently be delivered
    - notifier: receives each emitted AlertRequest (fire-and-forget)
    - clock: the single time source for schedules and cooldowns
    """

    def __init__(
        self,
        preferences: Callable[[], AlertPreferences],
        can_notify: Callable[[], bool] = _always_permitted,
        notifier: Optional[Callable[[AlertRequest], None]] = None,
        clock: Callable[[], datetime] = local_now,
        throttler: Optional[NotificationThrottler] = None,
        config: Settings = settings,
    ) -> None:
        self._preferences = preferences
        self._can_notify = can_notify
        self._notifier = notifier
        self._clock = clock
        self._config = config
        self.throttler = throttler or NotificationThrottler()

    # ── Glucose ──────────────────────────────────────────────

    def on_glucose(
        self,
        reading: GlucoseReading,
        previous: Optional[GlucoseReading] = None,
    ) -> Optional[AlertRequest]:
        """
        Evaluate a new glucose reading.

        Alarming readings are always admitted; otherwise the every-Nth-reading
        policy decides. The reading counter advances on every permitted call.
        """
        category = ThrottleCategory.GLUCOSE_PERIODIC
        prefs = self._preferences()

        if not self._permitted(category):
            return None

        now = self._clock()
        decision, is_snoozed = evaluate(
            reading.value, now, prefs.alarm_schedule, prefs.snooze
        )
        logger.info(
            "glucose_alarm_evaluated",
            glucose=reading.value,
            decision=decision.value,
            is_snoozed=is_snoozed,
        )

        policy = EveryNthCall(
            every_x_times=prefs.notify_every_x_times,
            always_display=prefs.always_display_glucose,
            bypass=decision.is_alarming,
        )
        if not self.throttler.admit(category, now, policy):
            logger.info("alert_throttled", category=category.value)
            return None

        try:
            formatter = get_formatter(prefs.glucose_unit)
        except UnsupportedGlucoseUnitError as exc:
            logger.warning(
                "glucose_unit_unsupported",
                unit=exc.unit,
                error=str(exc),
            )
            return None

        message = composer.compose_glucose_message(
            decision,
            reading.value,
            formatter,
            previous=previous.value if previous is not None else None,
            trend_label=reading.trend.label if reading.trend else None,
            is_snoozed=is_snoozed,
            vibrate_on_alarm=prefs.vibrate_on_alarm,
        )
        return self._emit(category, message, dedupe=True)

    # ── Device health ────────────────────────────────────────

    def on_low_battery(self, transmitter: TransmitterReading) -> Optional[AlertRequest]:
        category = ThrottleCategory.LOW_BATTERY
        prefs = self._preferences()
        if not prefs.alert_low_battery:
            logger.debug("alert_disabled", category=category.value)
            return None
        if transmitter.battery > self._config.low_battery_percent:
            logger.debug(
                "battery_above_threshold",
                battery=transmitter.battery,
                threshold=self._config.low_battery_percent,
            )
            return None

        policy = FixedCooldown(
            timedelta(minutes=self._config.low_battery_cooldown_minutes)
        )
        return self._dispatch(
            category, policy, lambda: composer.compose_low_battery(transmitter)
        )

    def on_sensor_expiring(self, sensor: SensorReading) -> Optional[AlertRequest]:
        category = ThrottleCategory.SENSOR_EXPIRING
        prefs = self._preferences()
        if not prefs.alert_will_soon_expire:
            logger.debug("alert_disabled", category=category.value)
            return None
        if sensor.minutes_since_start < self._config.sensor_expire_minutes:
            logger.debug(
                "sensor_not_expiring",
                minutes_since_start=sensor.minutes_since_start,
                sensor_age=sensor.human_readable_age,
            )
            return None

        policy = FixedCooldown(
            timedelta(hours=self._config.sensor_expire_cooldown_hours)
        )
        return self._dispatch(
            category, policy, lambda: composer.compose_sensor_expiring(sensor)
        )

    def on_no_sensor_detected(
        self, no_sensor: bool, device_name: str
    ) -> Optional[AlertRequest]:
        category = ThrottleCategory.NO_SENSOR_DETECTED
        if not (self._preferences().alert_no_sensor_detected and no_sensor):
            logger.debug("alert_not_applicable", category=category.value)
            return None
        return self._dispatch(
            category,
            Unconditional(),
            lambda: composer.compose_no_sensor_detected(device_name),
        )

    def on_sensor_changed(self) -> Optional[AlertRequest]:
        category = ThrottleCategory.SENSOR_CHANGED
        if not self._preferences().alert_new_sensor_detected:
            logger.debug("alert_disabled", category=category.value)
            return None
        return self._dispatch(category, Unconditional(), composer.compose_sensor_changed)

    def on_invalid_sensor(self, sensor: SensorReading) -> Optional[AlertRequest]:
        category = ThrottleCategory.INVALID_SENSOR
        if not self._preferences().alert_invalid_sensor_detected or sensor.is_valid:
            logger.debug("alert_not_applicable", category=category.value)
            return None
        return self._dispatch(
            category, Unconditional(), lambda: composer.compose_invalid_sensor(sensor)
        )

    def on_invalid_checksum(self, sensor: SensorReading) -> Optional[AlertRequest]:
        """Checksum alerts are a developer aid, gated on danger mode."""
        category = ThrottleCategory.INVALID_CHECKSUM
        if not self._preferences().danger_mode or sensor.has_valid_crcs:
            return None
        return self._dispatch(
            category, Unconditional(), composer.compose_invalid_checksum
        )

    def on_bluetooth_off(self) -> Optional[AlertRequest]:
        return self._dispatch(
            ThrottleCategory.BLUETOOTH_OFF,
            Unconditional(),
            composer.compose_bluetooth_off,
        )

    def on_no_transmitter_selected(self) -> Optional[AlertRequest]:
        return self._dispatch(
            ThrottleCategory.NO_TRANSMITTER_SELECTED,
            Unconditional(),
            composer.compose_no_transmitter_selected,
        )

    def on_calibration(self, message: str) -> Optional[AlertRequest]:
        return self._dispatch(
            ThrottleCategory.CALIBRATION,
            Unconditional(),
            lambda: composer.compose_calibration(message),
            dedupe=True,
        )

    # ── Internals ────────────────────────────────────────────

    def _permitted(self, category: ThrottleCategory) -> bool:
        if self._can_notify():
            return True
        logger.info("alert_permission_denied", category=category.value)
        return False

    def _dispatch(
        self,
        category: ThrottleCategory,
        policy: ThrottlePolicy,
        build: Callable[[], ComposedMessage],
        dedupe: bool = False,
    ) -> Optional[AlertRequest]:
        if not self._permitted(category):
            return None
        if not self.throttler.admit(category, self._clock(), policy):
            logger.info("alert_throttled", category=category.value)
            return None
        return self._emit(category, build(), dedupe=dedupe)

    def _emit(
        self,
        category: ThrottleCategory,
        message: ComposedMessage,
        dedupe: bool,
    ) -> AlertRequest:
        request = AlertRequest(
            category=category,
            title=message.title,
            body=message.body,
            play_sound=message.play_sound,
            should_vibrate=message.should_vibrate,
            dedupe=dedupe,
        )
        logger.info(
            "alert_emitted",
            category=category.value,
            title=request.title,
            dedupe=dedupe,
        )

        if self._notifier is not None:
            try:
                self._notifier(request)
            except Exception as exc:
                logger.error(
                    "alert_handoff_failed",
                    category=category.value,
                    error=str(exc),
                )

        return request
