"""
alerting/constants.py

Fixed values used by the alert engine.
Tunable thresholds and cooldowns live in config.Settings; this module holds
the values that are part of the message and unit contracts.
"""

# ── Unit conversion ──────────────────────────────────────────
MGDL_PER_MMOL: float = 18.0182

# ── Message titles ───────────────────────────────────────────
TITLE_GLUCOSE: str = "Glucose"
TITLE_LOW_ALERT: str = "LOWALERT!"
TITLE_HIGH_ALERT: str = "HIGHALERT!"
TITLE_SNOOZED: str = "(Snoozed)"

# ── Vibration pattern ────────────────────────────────────────
VIBRATION_PULSE_INTERVAL_S: float = 0.4
