"""
Report routes — the ingestion entry point.
"""
from flask import Blueprint, request, jsonify

from benchwatch.auth import current_submitter
from benchwatch.pipeline.ingest import ReportSubmission, ingest_report

bp = Blueprint('reports', __name__)


@bp.route('/api/reports', methods=['POST'])
def create_report():
    """Ingest one benchmark report; returns the report, its metrics and any alerts."""
    submitter = current_submitter()
    submission = ReportSubmission.from_dict(request.get_json(silent=True))
    result = ingest_report(submitter, submission)
    return jsonify(result.to_dict()), 201
