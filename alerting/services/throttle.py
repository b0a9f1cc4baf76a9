"""
alerting/services/throttle.py

Per-category admission gate for alerts.
- FixedCooldown: at most one alert per cooldown period (battery, sensor expiry)
- EveryNthCall: periodic glucose alerts, every Nth reading unless overridden
- Unconditional: always admitted; callers gate these on their own preconditions

State lives on the NotificationThrottler instance and is lost on restart.
"""

import copy
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

import structlog

from alerting.schemas import ThrottleCategory

logger = structlog.get_logger(__name__)


@dataclass
class ThrottleState:
    """Mutable throttle bookkeeping for one category."""

    last_fired_at: Optional[datetime] = None
    call_count: int = 0  # advanced only by EveryNthCall


@dataclass(frozen=True)
class FixedCooldown:
    cooldown: timedelta


@dataclass(frozen=True)
class EveryNthCall:
    """
    Admit every Nth call.

    always_display admits every call; bypass admits regardless of the counter
    (set when the reading is alarming). every_x_times <= 0 disables the
    counter path.
    """

    every_x_times: int
    always_display: bool = False
    bypass: bool = False


@dataclass(frozen=True)
class Unconditional:
    pass


ThrottlePolicy = Union[FixedCooldown, EveryNthCall, Unconditional]


class NotificationThrottler:
    """Tracks last-fired instants and call counters per category."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[ThrottleCategory, ThrottleState] = {}

    def admit(
        self,
        category: ThrottleCategory,
        now: datetime,
        policy: ThrottlePolicy,
    ) -> bool:
        """Decide whether an alert of `category` may fire at `now`."""
        with self._lock:
            state = self._states.setdefault(category, ThrottleState())

            if isinstance(policy, FixedCooldown):
                admitted = self._admit_cooldown(state, now, policy)
            elif isinstance(policy, EveryNthCall):
                admitted = self._admit_every_nth(state, policy)
            elif isinstance(policy, Unconditional):
                admitted = True
            else:
                raise TypeError(f"unknown throttle policy: {policy!r}")

            if admitted:
                state.last_fired_at = now

        logger.debug(
            "throttle_decision",
            category=category.value,
            admitted=admitted,
            policy=type(policy).__name__,
        )
        return admitted

    def snapshot(self, category: ThrottleCategory) -> ThrottleState:
        """Return a copy of the current state for `category`."""
        with self._lock:
            return copy.copy(self._states.get(category, ThrottleState()))

    def reset(self) -> None:
        with self._lock:
            self._states.clear()

    @staticmethod
    def _admit_cooldown(
        state: ThrottleState, now: datetime, policy: FixedCooldown
    ) -> bool:
        if policy.cooldown <= timedelta(0) or state.last_fired_at is None:
            return True
        return now >= state.last_fired_at + policy.cooldown

    @staticmethod
    def _admit_every_nth(state: ThrottleState, policy: EveryNthCall) -> bool:
        # The counter advances on every call, admitted or not
        state.call_count += 1
        if policy.always_display or policy.bypass:
            return True
        return (
            policy.every_x_times > 0
            and state.call_count % policy.every_x_times == 0
        )
