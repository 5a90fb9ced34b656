"""
Baseline reader — most recent historical values for one metric coordinate.

A coordinate is (project, benchmark, branch, testbed, measure). Values come
back newest first; an empty list means no history, never an error.
"""
from typing import List, Optional

from benchwatch.models.metric import Metric
from benchwatch.models.report import Report


def get_baseline(session, project_id: int, benchmark_id: int, branch_id: int,
                 testbed_id: int, measure_id: int, limit: int,
                 exclude_metric_id: Optional[int] = None) -> List[float]:
    """
    Return up to `limit` most recent values for the coordinate.

    Recency is the owning report's created_at; metric id breaks ties so rows
    written in the same second keep insertion order. `exclude_metric_id`
    keeps a just-stored metric out of its own baseline.
    """
    if limit <= 0:
        return []

    query = (
        session.query(Metric.value)
        .join(Report, Metric.report_id == Report.id)
        .filter(
            Report.project_id == project_id,
            Metric.benchmark_id == benchmark_id,
            Report.branch_id == branch_id,
            Report.testbed_id == testbed_id,
            Metric.measure_id == measure_id,
        )
    )
    if exclude_metric_id is not None:
        query = query.filter(Metric.id != exclude_metric_id)

    rows = (
        query
        .order_by(Report.created_at.desc(), Metric.id.desc())
        .limit(limit)
        .all()
    )
    return [float(row.value) for row in rows]
