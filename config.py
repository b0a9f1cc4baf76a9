"""
config.py

Centralized configuration management using pydantic-settings.
All modules must import settings from this file.
Direct os.getenv() calls are prohibited elsewhere.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine-wide settings loaded from .env file."""

    # Throttling
    low_battery_cooldown_minutes: int = 120
    sensor_expire_cooldown_hours: int = 6

    # Precondition gates
    low_battery_percent: int = 20
    sensor_expire_minutes: int = 19_440  # 13.5 days

    # Alarm side effects
    vibration_pulses: int = 3
    default_snooze_minutes: int = 120

    # Default user preferences (overridable at runtime via PreferenceStore)
    glucose_unit: str = "mg/dL"
    always_display_glucose: bool = False
    notify_every_x_times: int = 0
    alarm_schedule: list[dict] = []
    alert_low_battery: bool = True
    alert_will_soon_expire: bool = True
    alert_no_sensor_detected: bool = True
    alert_new_sensor_detected: bool = True
    alert_invalid_sensor_detected: bool = True
    vibrate_on_alarm: bool = True
    danger_mode: bool = False

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
