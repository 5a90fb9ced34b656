"""
Alert routes — status transitions (active → dismissed / resolved).
"""
from flask import Blueprint, jsonify

from benchwatch.auth import current_submitter
from benchwatch.database import session_scope
from benchwatch.services.alerts import dismiss_alert, resolve_alert

bp = Blueprint('alerts', __name__)


@bp.route('/api/alerts/<int:alert_id>/dismiss', methods=['POST'])
def dismiss_alert_route(alert_id):
    current_submitter()
    with session_scope() as session:
        alert = dismiss_alert(session, alert_id)
        session.commit()
        return jsonify(alert.to_dict())


@bp.route('/api/alerts/<int:alert_id>/resolve', methods=['POST'])
def resolve_alert_route(alert_id):
    current_submitter()
    with session_scope() as session:
        alert = resolve_alert(session, alert_id)
        session.commit()
        return jsonify(alert.to_dict())
