"""
Alert recorder + status transitions.

Alerts are inserted once per violation during ingestion (status 'active')
and later dismissed or resolved outside the ingestion path.
"""
import logging

from benchwatch.config import ALERT_ACTIVE, ALERT_DISMISSED, ALERT_RESOLVED
from benchwatch.errors import NotFound, InvalidInput
from benchwatch.models.alert import Alert

logger = logging.getLogger('services.alerts')


def record_alert(session, threshold_id: int, metric_id: int,
                 baseline_average: float, percent_change: float) -> Alert:
    """INSERT an active alert row. No dedup: metric ids are new per ingestion."""
    alert = Alert(
        threshold_id=threshold_id,
        metric_id=metric_id,
        baseline_value=baseline_average,
        percent_change=percent_change,
        status=ALERT_ACTIVE,
    )
    session.add(alert)
    session.flush()
    return alert


def _transition(session, alert_id: int, status: str) -> Alert:
    alert = session.get(Alert, alert_id)
    if alert is None:
        raise NotFound(f"Alert {alert_id} not found")
    if alert.status != ALERT_ACTIVE:
        raise InvalidInput(f"Alert {alert_id} is already {alert.status}")
    alert.status = status
    session.flush()
    logger.info("Alert %s → %s", alert_id, status, extra={'alert_id': alert_id})
    return alert


def dismiss_alert(session, alert_id: int) -> Alert:
    return _transition(session, alert_id, ALERT_DISMISSED)


def resolve_alert(session, alert_id: int) -> Alert:
    return _transition(session, alert_id, ALERT_RESOLVED)
