"""
alerting/dependencies.py

Process-wide engine instances shared by the routers.
Tests override get_orchestrator / get_preference_store via
app.dependency_overrides.
"""

from alerting.schemas import AlertPreferences
from alerting.services.orchestrator import AlertOrchestrator
from alerting.services.preferences import PreferenceStore
from config import settings

_preference_store = PreferenceStore(AlertPreferences.from_settings(settings))
_orchestrator = AlertOrchestrator(preferences=_preference_store.get)


def get_preference_store() -> PreferenceStore:
    return _preference_store


def get_orchestrator() -> AlertOrchestrator:
    return _orchestrator
