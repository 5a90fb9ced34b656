"""
Threshold matcher + threshold administration.

A threshold applies to a metric when project and measure match exactly and
its branch/testbed restriction is either NULL (wildcard) or equal. There is
no precedence: every match is returned, in id order.
"""
import logging
import math
from typing import List, Optional

from sqlalchemy import or_

from benchwatch.config import DEFAULT_MIN_SAMPLE_SIZE
from benchwatch.errors import NotFound, InvalidInput
from benchwatch.models.alert import Alert
from benchwatch.models.threshold import Threshold
from benchwatch.services.dimensions import dimension_belongs_to

logger = logging.getLogger('services.thresholds')


def get_applicable_thresholds(session, project_id: int, branch_id: int,
                              testbed_id: int, measure_id: int) -> List[Threshold]:
    """All thresholds whose scope covers the given coordinate."""
    return (
        session.query(Threshold)
        .filter(
            Threshold.project_id == project_id,
            or_(Threshold.branch_id.is_(None), Threshold.branch_id == branch_id),
            or_(Threshold.testbed_id.is_(None), Threshold.testbed_id == testbed_id),
            Threshold.measure_id == measure_id,
        )
        .order_by(Threshold.id)
        .all()
    )


def _check_boundary(name: str, value: Optional[float]):
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidInput(f"{name} must be a finite number")
    if value < 0:
        raise InvalidInput(f"{name} must not be negative")


def _check_min_sample_size(value):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInput("min_sample_size must be an integer >= 1")


def create_threshold(session, project_id: int, measure_id: int,
                     branch_id: Optional[int] = None, testbed_id: Optional[int] = None,
                     upper_boundary: Optional[float] = None,
                     lower_boundary: Optional[float] = None,
                     min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE) -> Threshold:
    """
    INSERT a threshold scoped to the project.

    Referenced dimension rows must belong to the same project.
    """
    _check_boundary('upper_boundary', upper_boundary)
    _check_boundary('lower_boundary', lower_boundary)
    _check_min_sample_size(min_sample_size)

    if not dimension_belongs_to(session, project_id, 'measure', measure_id):
        raise NotFound(f"Measure {measure_id} not found in project")
    if branch_id is not None and not dimension_belongs_to(session, project_id, 'branch', branch_id):
        raise NotFound(f"Branch {branch_id} not found in project")
    if testbed_id is not None and not dimension_belongs_to(session, project_id, 'testbed', testbed_id):
        raise NotFound(f"Testbed {testbed_id} not found in project")

    threshold = Threshold(
        project_id=project_id,
        branch_id=branch_id,
        testbed_id=testbed_id,
        measure_id=measure_id,
        upper_boundary=upper_boundary,
        lower_boundary=lower_boundary,
        min_sample_size=min_sample_size,
    )
    session.add(threshold)
    session.flush()
    logger.info("Created threshold %s for project %s measure %s", threshold.id, project_id, measure_id,
                extra={'threshold_id': threshold.id})
    return threshold


def update_threshold(session, threshold_id: int,
                     upper_boundary: Optional[float] = None,
                     lower_boundary: Optional[float] = None,
                     min_sample_size: Optional[int] = None) -> Threshold:
    """Change only the supplied fields; None leaves a field as it is."""
    threshold = session.get(Threshold, threshold_id)
    if threshold is None:
        raise NotFound(f"Threshold {threshold_id} not found")

    _check_boundary('upper_boundary', upper_boundary)
    _check_boundary('lower_boundary', lower_boundary)
    if min_sample_size is not None:
        _check_min_sample_size(min_sample_size)

    if upper_boundary is not None:
        threshold.upper_boundary = upper_boundary
    if lower_boundary is not None:
        threshold.lower_boundary = lower_boundary
    if min_sample_size is not None:
        threshold.min_sample_size = min_sample_size
    session.flush()
    return threshold


def delete_threshold(session, threshold_id: int) -> bool:
    """DELETE a threshold together with the alerts it raised. False if it does not exist."""
    threshold = session.get(Threshold, threshold_id)
    if threshold is None:
        return False
    alerts_deleted = (
        session.query(Alert)
        .filter(Alert.threshold_id == threshold_id)
        .delete(synchronize_session=False)
    )
    session.delete(threshold)
    session.flush()
    logger.info("Deleted threshold %s and %d alert(s)", threshold_id, alerts_deleted,
                extra={'threshold_id': threshold_id})
    return True
