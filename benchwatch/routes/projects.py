"""
Project routes — project creation + threshold creation under a project.
"""
from flask import Blueprint, request, jsonify

from benchwatch.auth import current_submitter
from benchwatch.config import DEFAULT_MIN_SAMPLE_SIZE
from benchwatch.database import session_scope
from benchwatch.errors import InvalidInput
from benchwatch.services.dimensions import resolve
from benchwatch.services.projects import create_project, get_project_by_slug
from benchwatch.services.thresholds import create_threshold

bp = Blueprint('projects', __name__)


@bp.route('/api/projects', methods=['POST'])
def create_project_route():
    """Create a project owned by the submitter."""
    owner_id = current_submitter()
    data = request.get_json(silent=True) or {}

    public = data.get('public', False)
    if not isinstance(public, bool):
        raise InvalidInput('public must be a boolean')

    with session_scope() as session:
        project = create_project(
            session, owner_id,
            slug=data.get('slug'),
            name=data.get('name'),
            description=data.get('description'),
            public=public,
        )
        session.commit()
        return jsonify(project.to_dict()), 201


def _dimension_ref(session, project_id, data, kind, required=False):
    """Resolve a threshold's dimension from either `<kind>` (name) or `<kind>_id`."""
    name = data.get(kind)
    if name is not None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput(f"{kind} must be a non-empty name")
        return resolve(session, project_id, kind, name)

    dimension_id = data.get(f"{kind}_id")
    if dimension_id is None:
        if required:
            raise InvalidInput(f"{kind} or {kind}_id is required")
        return None
    if isinstance(dimension_id, bool) or not isinstance(dimension_id, int):
        raise InvalidInput(f"{kind}_id must be an integer")
    return dimension_id


@bp.route('/api/projects/<slug>/thresholds', methods=['POST'])
def create_threshold_route(slug):
    """Create a threshold. Dimensions may be referenced by id or by name."""
    owner_id = current_submitter()
    data = request.get_json(silent=True) or {}

    with session_scope() as session:
        project = get_project_by_slug(session, owner_id, slug)
        threshold = create_threshold(
            session, project.id,
            measure_id=_dimension_ref(session, project.id, data, 'measure', required=True),
            branch_id=_dimension_ref(session, project.id, data, 'branch'),
            testbed_id=_dimension_ref(session, project.id, data, 'testbed'),
            upper_boundary=data.get('upper_boundary'),
            lower_boundary=data.get('lower_boundary'),
            min_sample_size=data.get('min_sample_size', DEFAULT_MIN_SAMPLE_SIZE),
        )
        session.commit()
        return jsonify(threshold.to_dict()), 201
