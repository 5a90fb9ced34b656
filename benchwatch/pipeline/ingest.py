"""
Ingestion orchestrator — turns one report submission into rows and alerts.

Per submission:
  RECEIVED → DIMENSIONS_RESOLVED → REPORT_CREATED
    → per metric: METRIC_STORED → BASELINE_FETCHED → EVALUATED → (ALERTS_RECORDED)
  → COMPLETED

The whole submission runs in one transaction. Validation happens before any
storage call; any failure after that rolls everything back, so a caller never
sees a report whose alerts were only partly evaluated.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from benchwatch.database import session_scope
from benchwatch.errors import InvalidInput
from benchwatch.services.alerts import record_alert
from benchwatch.services.baseline import get_baseline
from benchwatch.services.dimensions import (
    resolve_branch, resolve_testbed, resolve_benchmark, resolve_measure,
)
from benchwatch.services.projects import get_project_by_slug
from benchwatch.services.regression import evaluate
from benchwatch.services.reports import create_report, add_metric
from benchwatch.services.thresholds import get_applicable_thresholds

logger = logging.getLogger('pipeline.ingest')


# ── Submission payload ────────────────────────────────────────────────────────

@dataclass
class MetricInput:
    benchmark: str
    measure: str
    value: float
    lower_value: Optional[float] = None
    upper_value: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MetricInput':
        """Accepts both `benchmark`/`lower_value` and `benchmark_name`/`lower` spellings."""
        if not isinstance(data, dict):
            raise InvalidInput('Each metric must be an object')
        return cls(
            benchmark=data.get('benchmark', data.get('benchmark_name')),
            measure=data.get('measure', data.get('measure_name')),
            value=data.get('value'),
            lower_value=data.get('lower_value', data.get('lower')),
            upper_value=data.get('upper_value', data.get('upper')),
        )


@dataclass
class ReportSubmission:
    project_slug: str
    branch: str
    testbed: str
    metrics: List[MetricInput] = field(default_factory=list)
    git_hash: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReportSubmission':
        if not isinstance(data, dict):
            raise InvalidInput('Submission must be a JSON object')
        metrics = data.get('metrics')
        if not isinstance(metrics, list):
            raise InvalidInput('metrics must be a list')
        return cls(
            project_slug=data.get('project_slug'),
            branch=data.get('branch', data.get('branch_name')),
            testbed=data.get('testbed', data.get('testbed_name')),
            git_hash=data.get('git_hash', data.get('revision')),
            metrics=[MetricInput.from_dict(m) for m in metrics],
        )


@dataclass
class IngestResult:
    report: Dict[str, Any]
    metrics: List[Dict[str, Any]]
    alerts: List[Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'report': self.report,
            'metrics': self.metrics,
            'alerts': self.alerts,
        }


# ── Validation ────────────────────────────────────────────────────────────────

def _require_name(label: str, value):
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{label} is required")


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_submission(submission: ReportSubmission):
    """Reject a submission before anything touches storage."""
    _require_name('project_slug', submission.project_slug)
    _require_name('branch', submission.branch)
    _require_name('testbed', submission.testbed)
    if submission.git_hash is not None and not isinstance(submission.git_hash, str):
        raise InvalidInput('git_hash must be a string')
    if not submission.metrics:
        raise InvalidInput('At least one metric is required')

    for i, metric in enumerate(submission.metrics):
        _require_name(f"metrics[{i}].benchmark", metric.benchmark)
        _require_name(f"metrics[{i}].measure", metric.measure)
        if not _is_finite_number(metric.value):
            raise InvalidInput(f"metrics[{i}].value must be a finite number")
        for bound in ('lower_value', 'upper_value'):
            v = getattr(metric, bound)
            if v is not None and not _is_finite_number(v):
                raise InvalidInput(f"metrics[{i}].{bound} must be a finite number")


# ── Orchestration ─────────────────────────────────────────────────────────────

def _transition(report_ref, state: str):
    logger.debug("Submission %s → %s", report_ref, state)


def _resolve_metric_dimensions(session, project_id: int, metrics: List[MetricInput]):
    """
    Resolve every benchmark and measure name up front, in sorted order.

    Concurrent submissions then insert new dimension rows in the same order
    whatever order their metrics arrive in.
    """
    benchmark_ids = {
        name: resolve_benchmark(session, project_id, name)
        for name in sorted({m.benchmark for m in metrics})
    }
    measure_ids = {
        name: resolve_measure(session, project_id, name)
        for name in sorted({m.measure for m in metrics})
    }
    return benchmark_ids, measure_ids


def _process_metric(session, project_id: int, branch_id: int, testbed_id: int,
                    benchmark_id: int, measure_id: int,
                    report_id: int, metric_input: MetricInput):
    """Store one metric and evaluate every applicable threshold. Returns (metric, alerts)."""
    metric = add_metric(
        session, report_id, benchmark_id, measure_id,
        float(metric_input.value),
        metric_input.lower_value, metric_input.upper_value,
    )
    _transition(report_id, f"METRIC_STORED metric={metric.id}")

    alerts = []
    thresholds = get_applicable_thresholds(session, project_id, branch_id, testbed_id, measure_id)
    for threshold in thresholds:
        baseline_values = get_baseline(
            session, project_id, benchmark_id, branch_id, testbed_id, measure_id,
            limit=threshold.min_sample_size,
            exclude_metric_id=metric.id,
        )
        _transition(report_id, f"BASELINE_FETCHED metric={metric.id} "
                               f"threshold={threshold.id} samples={len(baseline_values)}")

        violation = evaluate(threshold, metric.value, baseline_values)
        _transition(report_id, f"EVALUATED metric={metric.id} threshold={threshold.id}")
        if violation is None:
            continue

        alert = record_alert(
            session, threshold.id, metric.id,
            violation.baseline_average, violation.percent_change,
        )
        alerts.append(alert)
        logger.warning(
            "Regression on '%s' (%s): %+.2f%% vs baseline %.4g [threshold %s, %s]",
            metric_input.benchmark, metric_input.measure, violation.percent_change,
            violation.baseline_average, threshold.id, violation.direction.value,
            extra={'report_id': report_id, 'metric_id': metric.id, 'threshold_id': threshold.id},
        )

    return metric, alerts


def ingest_report(submitter_id: str, submission: ReportSubmission) -> IngestResult:
    """
    Materialize a report submission and evaluate its metrics against thresholds.

    `submitter_id` is the authenticated owner whose project slug is looked up.
    Raises InvalidInput / NotFound / StorageUnavailable / StorageRejected;
    nothing is committed unless every metric was stored and evaluated.
    """
    validate_submission(submission)
    logger.debug("Submission for %s/%s received with %d metric(s)",
                 submitter_id, submission.project_slug, len(submission.metrics))

    with session_scope() as session:
        project = get_project_by_slug(session, submitter_id, submission.project_slug)

        branch_id = resolve_branch(session, project.id, submission.branch)
        testbed_id = resolve_testbed(session, project.id, submission.testbed)
        benchmark_ids, measure_ids = _resolve_metric_dimensions(session, project.id, submission.metrics)
        _transition(submission.project_slug, 'DIMENSIONS_RESOLVED')

        report = create_report(session, project.id, branch_id, testbed_id, submission.git_hash)
        _transition(report.id, 'REPORT_CREATED')

        metrics = []
        alerts = []
        for metric_input in submission.metrics:
            metric, metric_alerts = _process_metric(
                session, project.id, branch_id, testbed_id,
                benchmark_ids[metric_input.benchmark], measure_ids[metric_input.measure],
                report.id, metric_input,
            )
            metrics.append(metric)
            alerts.extend(metric_alerts)

        session.commit()
        _transition(report.id, 'COMPLETED')

        result = IngestResult(
            report=report.to_dict(),
            metrics=[m.to_dict() for m in metrics],
            alerts=[a.to_dict() for a in alerts],
        )

    logger.info("Report %s ingested for project %s: %d metric(s), %d alert(s)",
                result.report['id'], submission.project_slug, len(result.metrics), len(result.alerts),
                extra={'project': submission.project_slug, 'report_id': result.report['id']})
    return result
