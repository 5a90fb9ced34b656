"""
Project model — one row per owner + slug. Owns every dimension, report and threshold.
"""
from sqlalchemy import Column, Integer, Text, Boolean, DateTime, UniqueConstraint
from sqlalchemy.sql import func

from benchwatch.database import Base


class Project(Base):
    __tablename__ = 'projects'

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Text, nullable=False)
    slug = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('owner_id', 'slug', name='uq_project_owner_slug'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'slug': self.slug,
            'name': self.name,
            'description': self.description,
            'public': self.public,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
