"""
Project service — creation and per-owner slug lookup.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from benchwatch.config import DEFAULT_MEASURE, DEFAULT_MEASURE_UNITS
from benchwatch.errors import AlreadyExists, InvalidInput, NotFound
from benchwatch.models.project import Project
from benchwatch.services.dimensions import resolve_measure

logger = logging.getLogger('services.projects')


def create_project(session, owner_id: str, slug: str, name: str,
                   description: Optional[str] = None, public: bool = False) -> Project:
    """
    INSERT a project and seed its default measure.

    A second project with the same slug for the same owner raises AlreadyExists.
    """
    if not isinstance(slug, str) or not slug.strip():
        raise InvalidInput('slug is required')
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput('name is required')
    slug = slug.strip()

    project = Project(
        owner_id=owner_id,
        slug=slug,
        name=name,
        description=description,
        public=public,
    )
    session.add(project)
    try:
        session.flush()
    except IntegrityError as e:
        raise AlreadyExists(f"A project with slug '{slug}' already exists") from e

    resolve_measure(session, project.id, DEFAULT_MEASURE, DEFAULT_MEASURE_UNITS)
    logger.info("Created project %s (%s) for owner %s", project.id, slug, owner_id)
    return project


def get_project_by_slug(session, owner_id: str, slug: str) -> Project:
    project = (
        session.query(Project)
        .filter(Project.owner_id == owner_id, Project.slug == slug)
        .first()
    )
    if project is None:
        raise NotFound(f"Project '{slug}' not found")
    return project
