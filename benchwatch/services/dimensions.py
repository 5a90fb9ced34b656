"""
Dimension resolver — idempotent (project, kind, name) → id mapping.

Backed by an atomic INSERT ... ON CONFLICT DO NOTHING ... RETURNING on the
(project_id, name) unique constraint, followed by a plain SELECT when the row
already exists. Concurrent first-writers of the same name converge on a single
row and never see a uniqueness error, and existing rows are not locked for
the rest of the caller's transaction.
"""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite

from benchwatch.models.dimensions import DIMENSION_MODELS

logger = logging.getLogger('services.dimensions')

# Dialects with a native upsert clause
_UPSERT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


def _upsert_insert(session):
    dialect = session.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"No atomic upsert available for dialect '{dialect}'")
    return insert


def resolve(session, project_id: int, kind: str, name: str, extra: Optional[str] = None) -> int:
    """
    Return the id of the `kind` row named `name` in the project, creating it if needed.

    For measures, `extra` is the unit string. A stored unit is kept;
    an incoming unit only fills a NULL one.
    """
    model = DIMENSION_MODELS.get(kind)
    if model is None:
        raise ValueError(f"Unknown dimension kind '{kind}'. Available: {list(DIMENSION_MODELS)}")

    table = model.__table__
    insert = _upsert_insert(session)

    values = {'project_id': project_id, 'name': name}
    if kind == 'measure':
        values['units'] = extra

    stmt = (
        insert(table)
        .values(**values)
        .on_conflict_do_nothing(index_elements=['project_id', 'name'])
        .returning(table.c.id)
    )
    dimension_id = session.execute(stmt).scalar_one_or_none()
    if dimension_id is not None:
        logger.debug("Created %s '%s' in project %s → %s", kind, name, project_id, dimension_id)
        return dimension_id

    # Existing row: read it without taking a row lock
    dimension_id = session.execute(
        select(table.c.id).where(table.c.project_id == project_id, table.c.name == name)
    ).scalar_one()

    if kind == 'measure' and extra is not None:
        # Matches no row (so locks none) once a unit is stored
        session.execute(
            update(table)
            .where(table.c.id == dimension_id, table.c.units.is_(None))
            .values(units=extra)
        )

    logger.debug("Resolved %s '%s' in project %s → %s", kind, name, project_id, dimension_id)
    return dimension_id


def resolve_branch(session, project_id: int, name: str) -> int:
    return resolve(session, project_id, 'branch', name)


def resolve_testbed(session, project_id: int, name: str) -> int:
    return resolve(session, project_id, 'testbed', name)


def resolve_benchmark(session, project_id: int, name: str) -> int:
    return resolve(session, project_id, 'benchmark', name)


def resolve_measure(session, project_id: int, name: str, units: Optional[str] = None) -> int:
    return resolve(session, project_id, 'measure', name, units)


def dimension_belongs_to(session, project_id: int, kind: str, dimension_id: int) -> bool:
    """True if the `kind` row with this id exists and belongs to the project."""
    model = DIMENSION_MODELS[kind]
    row = session.get(model, dimension_id)
    return row is not None and row.project_id == project_id
