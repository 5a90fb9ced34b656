"""Tests for benchwatch.pipeline.ingest — submission → report, metrics, alerts."""
import math

import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from benchwatch.errors import InvalidInput, NotFound, StorageUnavailable
from benchwatch.models.alert import Alert
from benchwatch.models.dimensions import Benchmark, Branch
from benchwatch.models.metric import Metric
from benchwatch.models.report import Report
from benchwatch.pipeline.ingest import (
    MetricInput, ReportSubmission, ingest_report, validate_submission,
)
from benchwatch.services.dimensions import resolve, resolve_benchmark
from benchwatch.services.thresholds import create_threshold


def _submission(values=(100.0,), branch='main', testbed='linux', benchmark='fib/10', **kwargs):
    return ReportSubmission(
        project_slug=kwargs.pop('project_slug', 'demo'),
        branch=branch,
        testbed=testbed,
        metrics=[MetricInput(benchmark=benchmark, measure='latency', value=v) for v in values],
        **kwargs,
    )


@pytest.fixture
def latency_id(db_session, project):
    return resolve(db_session, project.id, 'measure', 'latency')


@pytest.fixture
def upper_threshold(db_session, project, latency_id):
    t = create_threshold(db_session, project.id, latency_id, upper_boundary=10.0, lower_boundary=10.0)
    db_session.commit()
    return t


# ---------------------------------------------------------------------------
# Submission parsing + validation
# ---------------------------------------------------------------------------

class TestReportSubmissionFromDict:

    def test_accepts_both_spellings(self):
        sub = ReportSubmission.from_dict({
            'project_slug': 'demo',
            'branch_name': 'main',
            'testbed_name': 'linux',
            'revision': 'abc',
            'metrics': [{'benchmark_name': 'b', 'measure_name': 'latency', 'value': 1.0,
                         'lower': 0.5, 'upper': 1.5}],
        })
        assert sub.branch == 'main'
        assert sub.git_hash == 'abc'
        assert sub.metrics[0].benchmark == 'b'
        assert sub.metrics[0].lower_value == 0.5
        assert sub.metrics[0].upper_value == 1.5

    def test_metrics_must_be_list(self):
        with pytest.raises(InvalidInput):
            ReportSubmission.from_dict({'project_slug': 'demo', 'metrics': 'nope'})

    def test_non_object(self):
        with pytest.raises(InvalidInput):
            ReportSubmission.from_dict(None)

    def test_metric_must_be_object(self):
        with pytest.raises(InvalidInput):
            ReportSubmission.from_dict({'metrics': [1]})


class TestValidateSubmission:

    def test_valid(self):
        validate_submission(_submission())

    def test_empty_metrics(self):
        with pytest.raises(InvalidInput):
            validate_submission(_submission(values=()))

    @pytest.mark.parametrize('value', [math.nan, math.inf, -math.inf, None, '1.0', True])
    def test_non_finite_or_non_numeric_value(self, value):
        with pytest.raises(InvalidInput):
            validate_submission(_submission(values=(value,)))

    def test_non_finite_bound(self):
        sub = _submission()
        sub.metrics[0].upper_value = math.inf
        with pytest.raises(InvalidInput):
            validate_submission(sub)

    @pytest.mark.parametrize('field', ['branch', 'testbed', 'project_slug'])
    def test_blank_names(self, field):
        sub = _submission()
        setattr(sub, field, '  ')
        with pytest.raises(InvalidInput):
            validate_submission(sub)

    def test_blank_benchmark(self):
        with pytest.raises(InvalidInput):
            validate_submission(_submission(benchmark=''))

    def test_integer_value_is_fine(self):
        validate_submission(_submission(values=(42,)))


# ---------------------------------------------------------------------------
# ingest_report
# ---------------------------------------------------------------------------

class TestIngestReport:

    def test_first_report_stores_exact_value_and_no_alerts(self, db_session, project, upper_threshold):
        result = ingest_report('owner-1', _submission(values=(1245.6,), git_hash='abc'))
        assert result.alerts == []
        assert result.report['git_hash'] == 'abc'
        metric = db_session.get(Metric, result.metrics[0]['id'])
        assert metric.value == 1245.6
        assert metric.report_id == result.report['id']

    def test_creates_dimensions_lazily(self, db_session, project):
        ingest_report('owner-1', _submission(branch='feature-x', benchmark='sort/1k'))
        assert db_session.query(Branch).filter_by(project_id=project.id, name='feature-x').count() == 1
        assert db_session.query(Benchmark).filter_by(project_id=project.id, name='sort/1k').count() == 1

    def test_reuses_dimensions_across_reports(self, db_session, project):
        first = ingest_report('owner-1', _submission())
        second = ingest_report('owner-1', _submission())
        assert first.report['branch_id'] == second.report['branch_id']
        assert first.metrics[0]['benchmark_id'] == second.metrics[0]['benchmark_id']
        assert db_session.query(Report).count() == 2

    def test_upper_regression_raises_alert(self, db_session, project, upper_threshold):
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        result = ingest_report('owner-1', _submission(values=(115.0,)))

        assert len(result.alerts) == 1
        alert = result.alerts[0]
        assert alert['threshold_id'] == upper_threshold.id
        assert alert['metric_id'] == result.metrics[0]['id']
        assert alert['baseline_average'] == pytest.approx(100.0)
        assert alert['percent_change'] == pytest.approx(15.0)
        assert alert['status'] == 'active'

    def test_lower_regression_raises_alert(self, project, upper_threshold):
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        result = ingest_report('owner-1', _submission(values=(85.0,)))
        assert [a['percent_change'] for a in result.alerts] == [pytest.approx(-15.0)]

    def test_within_bounds_no_alert(self, project, upper_threshold):
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        assert ingest_report('owner-1', _submission(values=(105.0,))).alerts == []

    def test_new_value_excluded_from_own_baseline(self, project, upper_threshold):
        # Including 115 itself would give avg 107.5 → +6.98%, below the 10% bound.
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        result = ingest_report('owner-1', _submission(values=(115.0,)))
        assert result.alerts[0]['baseline_average'] == pytest.approx(100.0)

    def test_baseline_sized_to_min_sample_size(self, db_session, project, latency_id):
        create_threshold(db_session, project.id, latency_id, upper_boundary=10.0, min_sample_size=2)
        db_session.commit()
        for v in (1000.0, 100.0, 100.0):
            ingest_report('owner-1', _submission(values=(v,)))
        result = ingest_report('owner-1', _submission(values=(105.0,)))
        # Only the two most recent (100, 100) count; the old 1000 is outside the window.
        assert result.alerts == []

    def test_insufficient_history(self, db_session, project, latency_id):
        create_threshold(db_session, project.id, latency_id, upper_boundary=1.0, min_sample_size=5)
        db_session.commit()
        for _ in range(4):
            ingest_report('owner-1', _submission(values=(100.0,)))
        assert ingest_report('owner-1', _submission(values=(500.0,))).alerts == []

    def test_wildcard_and_branch_specific_thresholds_both_fire(self, db_session, project, latency_id):
        main = resolve(db_session, project.id, 'branch', 'main')
        wildcard = create_threshold(db_session, project.id, latency_id, upper_boundary=10.0)
        specific = create_threshold(db_session, project.id, latency_id, branch_id=main,
                                    upper_boundary=5.0)
        db_session.commit()

        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))

        both = ingest_report('owner-1', _submission(values=(120.0,)))
        assert [a['threshold_id'] for a in both.alerts] == [wildcard.id, specific.id]

        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        one = ingest_report('owner-1', _submission(values=(107.0,)))
        assert [a['threshold_id'] for a in one.alerts] == [specific.id]

    def test_branch_specific_threshold_ignores_other_branch(self, db_session, project, latency_id):
        main = resolve(db_session, project.id, 'branch', 'main')
        create_threshold(db_session, project.id, latency_id, branch_id=main, upper_boundary=5.0)
        db_session.commit()
        for _ in range(2):
            ingest_report('owner-1', _submission(values=(100.0,), branch='feature'))
        assert ingest_report('owner-1', _submission(values=(200.0,), branch='feature')).alerts == []

    def test_alerts_follow_metric_order(self, project, upper_threshold):
        for _ in range(2):
            ingest_report('owner-1', ReportSubmission(
                project_slug='demo', branch='main', testbed='linux',
                metrics=[MetricInput('a', 'latency', 100.0), MetricInput('b', 'latency', 100.0)],
            ))
        result = ingest_report('owner-1', ReportSubmission(
            project_slug='demo', branch='main', testbed='linux',
            metrics=[MetricInput('a', 'latency', 150.0), MetricInput('b', 'latency', 50.0)],
        ))
        assert [a['metric_id'] for a in result.alerts] == [m['id'] for m in result.metrics]
        assert result.alerts[0]['percent_change'] > 0
        assert result.alerts[1]['percent_change'] < 0

    def test_duplicate_metrics_in_one_submission(self, db_session, project):
        result = ingest_report('owner-1', _submission(values=(1.0, 1.0)))
        assert len(result.metrics) == 2
        assert result.metrics[0]['id'] != result.metrics[1]['id']

    def test_metric_dimensions_resolved_once_in_sorted_order(self, project):
        metrics = [MetricInput(name, 'latency', 1.0) for name in ('sort', 'fib', 'sort', 'alloc')]
        with patch('benchwatch.pipeline.ingest.resolve_benchmark', wraps=resolve_benchmark) as spy:
            result = ingest_report('owner-1', ReportSubmission(
                project_slug='demo', branch='main', testbed='linux', metrics=metrics,
            ))
        assert [c.args[2] for c in spy.call_args_list] == ['alloc', 'fib', 'sort']
        assert result.metrics[0]['benchmark_id'] == result.metrics[2]['benchmark_id']

    def test_logs_regression_as_warning(self, project, upper_threshold, caplog):
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        with caplog.at_level('WARNING', logger='pipeline.ingest'):
            ingest_report('owner-1', _submission(values=(130.0,)))
        assert 'Regression' in caplog.text

    def test_regression_log_carries_identifiers(self, project, upper_threshold, caplog):
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        with caplog.at_level('WARNING', logger='pipeline.ingest'):
            result = ingest_report('owner-1', _submission(values=(130.0,)))
        record = next(r for r in caplog.records if r.levelname == 'WARNING')
        assert record.threshold_id == upper_threshold.id
        assert record.report_id == result.report['id']
        assert record.metric_id == result.metrics[0]['id']


class TestIngestFailures:

    def test_invalid_input_touches_nothing(self, db_session, project):
        with patch('benchwatch.pipeline.ingest.session_scope') as scope:
            with pytest.raises(InvalidInput):
                ingest_report('owner-1', _submission(values=(math.nan,)))
        scope.assert_not_called()
        assert db_session.query(Report).count() == 0

    def test_unknown_project(self, db_session, project):
        with pytest.raises(NotFound):
            ingest_report('owner-1', _submission(project_slug='missing'))
        assert db_session.query(Branch).count() == 0

    def test_other_owners_project_not_found(self, project):
        with pytest.raises(NotFound):
            ingest_report('owner-2', _submission())

    def test_storage_failure_mid_metric_rolls_back_everything(self, db_session, project, upper_threshold):
        error = OperationalError('SELECT ...', {}, Exception('connection lost'))
        with patch('benchwatch.pipeline.ingest.get_baseline', side_effect=error):
            with pytest.raises(StorageUnavailable) as exc_info:
                ingest_report('owner-1', _submission(values=(1.0, 2.0)))
        assert exc_info.value.retryable is True
        assert db_session.query(Report).count() == 0
        assert db_session.query(Metric).count() == 0
        assert db_session.query(Alert).count() == 0

    def test_alert_insert_failure_aborts_submission(self, db_session, project, upper_threshold):
        ingest_report('owner-1', _submission(values=(100.0,)))
        ingest_report('owner-1', _submission(values=(100.0,)))
        error = OperationalError('INSERT ...', {}, Exception('disk full'))
        with patch('benchwatch.pipeline.ingest.record_alert', side_effect=error):
            with pytest.raises(StorageUnavailable):
                ingest_report('owner-1', _submission(values=(200.0,)))
        assert db_session.query(Report).count() == 2
