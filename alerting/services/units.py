"""
alerting/services/units.py

Glucose display formatting for the supported unit systems.
Values enter the engine in mg/dL and are converted for display only.
"""

from alerting.constants import MGDL_PER_MMOL
from alerting.errors import UnsupportedGlucoseUnitError
from alerting.schemas import GlucoseUnit


class UnitFormatter:
    """Formats mg/dL scalars as display strings in one unit system."""

    def __init__(self, unit: GlucoseUnit) -> None:
        self.unit = unit

    def convert(self, value_mgdl: float) -> float:
        if self.unit is GlucoseUnit.MMOLL:
            return value_mgdl / MGDL_PER_MMOL
        return value_mgdl

    def format(self, value_mgdl: float) -> str:
        """Format a value, e.g. '120 mg/dL' or '6.7 mmol/L'."""
        converted = self.convert(value_mgdl)
        if self.unit is GlucoseUnit.MMOLL:
            return f"{converted:.1f} {self.unit.value}"
        return f"{converted:.0f} {self.unit.value}"


def get_formatter(unit: str) -> UnitFormatter:
    """
    Return the formatter for a configured unit string.

    Raises UnsupportedGlucoseUnitError when the unit is not mg/dL or mmol/L.
    """
    try:
        return UnitFormatter(GlucoseUnit(unit))
    except ValueError:
        raise UnsupportedGlucoseUnitError(unit) from None
