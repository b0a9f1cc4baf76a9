"""
alerting/errors.py

Error types raised inside the alert engine.
They never escape AlertOrchestrator; it logs them and drops the event.
"""


class AlertEngineError(Exception):
    """Base error for alert engine failures."""


class UnsupportedGlucoseUnitError(AlertEngineError):
    """The configured glucose unit has no formatter."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"unsupported glucose unit: {unit!r}")
        self.unit = unit
