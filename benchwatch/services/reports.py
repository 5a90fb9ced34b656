"""
Report store — inserts for reports and their metric rows.

Plain inserts: no dedup, no range checks. Callers reject non-finite values
first and own the transaction boundary.
"""
import logging
from typing import Optional

from benchwatch.models.metric import Metric
from benchwatch.models.report import Report

logger = logging.getLogger('services.reports')


def create_report(session, project_id: int, branch_id: int, testbed_id: int,
                  git_hash: Optional[str] = None) -> Report:
    """INSERT a report row and flush to obtain its id."""
    report = Report(
        project_id=project_id,
        branch_id=branch_id,
        testbed_id=testbed_id,
        git_hash=git_hash,
    )
    session.add(report)
    session.flush()
    logger.debug("Created report %s for project %s (branch %s, testbed %s)",
                 report.id, project_id, branch_id, testbed_id)
    return report


def add_metric(session, report_id: int, benchmark_id: int, measure_id: int, value: float,
               lower_value: Optional[float] = None, upper_value: Optional[float] = None) -> Metric:
    """INSERT one metric row under a report and flush to obtain its id."""
    metric = Metric(
        report_id=report_id,
        benchmark_id=benchmark_id,
        measure_id=measure_id,
        value=value,
        lower_value=lower_value,
        upper_value=upper_value,
    )
    session.add(metric)
    session.flush()
    return metric
