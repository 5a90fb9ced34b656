"""Shared test fixtures."""
import pytest
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from benchwatch.database import Base


def _import_models():
    import benchwatch.models.project
    import benchwatch.models.dimensions
    import benchwatch.models.report
    import benchwatch.models.metric
    import benchwatch.models.threshold
    import benchwatch.models.alert


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    _import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """Temp-file SQLite engine, shareable across threads."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'bench.db'}",
        connect_args={'check_same_thread': False, 'timeout': 30},
    )
    _import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(autouse=True)
def patch_get_session(db_session):
    """Route all get_session() calls to the test session.

    We disable close() so that session_scope() closing its session
    doesn't invalidate the shared test session.
    """
    _real_close = db_session.close
    db_session.close = lambda: None
    with patch('benchwatch.database.get_session', return_value=db_session):
        yield db_session
    db_session.close = _real_close


@pytest.fixture
def app():
    """Flask test app."""
    from benchwatch import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c


@pytest.fixture
def make_project(db_session):
    """Factory fixture — inserts and commits a project (with its default measure)."""
    from benchwatch.services.projects import create_project

    def _make(owner_id='owner-1', slug='demo', name='Demo', **kwargs):
        project = create_project(db_session, owner_id, slug, name, **kwargs)
        db_session.commit()
        return project
    return _make


@pytest.fixture
def project(make_project):
    return make_project()


@pytest.fixture
def coordinate(db_session, project):
    """Resolved (branch, testbed, benchmark, measure) ids for the default project."""
    from benchwatch.services.dimensions import resolve
    ids = {
        'project_id': project.id,
        'branch_id': resolve(db_session, project.id, 'branch', 'main'),
        'testbed_id': resolve(db_session, project.id, 'testbed', 'linux'),
        'benchmark_id': resolve(db_session, project.id, 'benchmark', 'fib/10'),
        'measure_id': resolve(db_session, project.id, 'measure', 'latency'),
    }
    db_session.commit()
    return ids


@pytest.fixture
def add_history(db_session, coordinate):
    """Factory fixture — one report per value on the default coordinate, oldest first."""
    from benchwatch.services.reports import create_report, add_metric

    def _add(values, **overrides):
        c = dict(coordinate, **overrides)
        metrics = []
        for value in values:
            report = create_report(db_session, c['project_id'], c['branch_id'], c['testbed_id'])
            metrics.append(add_metric(db_session, report.id, c['benchmark_id'], c['measure_id'], value))
        db_session.commit()
        return metrics
    return _add


@pytest.fixture
def submitter_headers():
    return {'X-Submitter': 'owner-1'}
