"""
Threshold routes — edit and delete.
"""
from flask import Blueprint, request, jsonify

from benchwatch.auth import current_submitter
from benchwatch.database import session_scope
from benchwatch.errors import NotFound
from benchwatch.services.thresholds import update_threshold, delete_threshold

bp = Blueprint('thresholds', __name__)


@bp.route('/api/thresholds/<int:threshold_id>', methods=['PATCH'])
def update_threshold_route(threshold_id):
    """Update boundaries / min sample size. Omitted fields stay unchanged."""
    current_submitter()
    data = request.get_json(silent=True) or {}
    with session_scope() as session:
        threshold = update_threshold(
            session, threshold_id,
            upper_boundary=data.get('upper_boundary'),
            lower_boundary=data.get('lower_boundary'),
            min_sample_size=data.get('min_sample_size'),
        )
        session.commit()
        return jsonify(threshold.to_dict())


@bp.route('/api/thresholds/<int:threshold_id>', methods=['DELETE'])
def delete_threshold_route(threshold_id):
    current_submitter()
    with session_scope() as session:
        if not delete_threshold(session, threshold_id):
            raise NotFound(f"Threshold {threshold_id} not found")
        session.commit()
    return jsonify({'deleted': True})
