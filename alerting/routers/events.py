"""
alerting/routers/events.py

POST /events/* endpoints.
Each request is one engine event; emitted alerts are handed to the notifier
as background tasks so the response never waits on delivery.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends

from alerting.dependencies import get_orchestrator
from alerting.schemas import (
    AlertListResponse,
    AlertRequest,
    AlertResponse,
    CalibrationEvent,
    GlucoseEvent,
    NoSensorEvent,
    SensorReading,
    TransmitterReading,
)
from alerting.services.notification import send_alert
from alerting.services.orchestrator import AlertOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def _respond(
    alert: Optional[AlertRequest], background_tasks: BackgroundTasks
) -> AlertResponse:
    if alert is not None:
        background_tasks.add_task(send_alert, alert)
    return AlertResponse(alert=alert)


@router.post("/glucose")
async def receive_glucose(
    event: GlucoseEvent,
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    logger.info(
        "glucose_event_received",
        glucose=event.reading.value,
        has_previous=event.previous is not None,
    )
    alert = orchestrator.on_glucose(event.reading, event.previous)
    return _respond(alert, background_tasks)


@router.post("/battery")
async def receive_battery(
    transmitter: TransmitterReading,
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    return _respond(orchestrator.on_low_battery(transmitter), background_tasks)


@router.post("/sensor")
async def receive_sensor(
    sensor: SensorReading,
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertListResponse:
    """
    Run the sensor-state checks for one decoded packet.

    Expiry, validity and checksum are evaluated as separate events, so a
    single packet may produce up to three alerts.
    """
    candidates = [
        orchestrator.on_sensor_expiring(sensor),
        orchestrator.on_invalid_sensor(sensor),
        orchestrator.on_invalid_checksum(sensor),
    ]
    alerts = [alert for alert in candidates if alert is not None]
    for alert in alerts:
        background_tasks.add_task(send_alert, alert)
    return AlertListResponse(alerts=alerts)


@router.post("/no-sensor")
async def receive_no_sensor(
    event: NoSensorEvent,
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    alert = orchestrator.on_no_sensor_detected(event.no_sensor, event.device_name)
    return _respond(alert, background_tasks)


@router.post("/sensor-change")
async def receive_sensor_change(
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    return _respond(orchestrator.on_sensor_changed(), background_tasks)


@router.post("/bluetooth-off")
async def receive_bluetooth_off(
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    return _respond(orchestrator.on_bluetooth_off(), background_tasks)


@router.post("/no-transmitter")
async def receive_no_transmitter(
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    return _respond(orchestrator.on_no_transmitter_selected(), background_tasks)


@router.post("/calibration")
async def receive_calibration(
    event: CalibrationEvent,
    background_tasks: BackgroundTasks,
    orchestrator: AlertOrchestrator = Depends(get_orchestrator),
) -> AlertResponse:
    return _respond(orchestrator.on_calibration(event.message), background_tasks)
