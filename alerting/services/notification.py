"""
alerting/services/notification.py

Hand-off of composed alerts to the platform notifier.
Currently implements a logging stub for the FCM/APNs integration.
"""

import structlog

from alerting.schemas import AlertRequest

logger = structlog.get_logger(__name__)


async def send_alert(request: AlertRequest) -> None:
    """
    Deliver an alert to the user's device.

    When request.dedupe is set, pending and delivered notifications of the
    same category are cleared before posting. Delivery errors are logged by
    the transport and never retried.
    """
    if request.dedupe:
        logger.info("alert_previous_cleared", category=request.category.value)
    logger.info(
        "alert_delivered",
        category=request.category.value,
        title=request.title,
        play_sound=request.play_sound,
        should_vibrate=request.should_vibrate,
    )
