"""
Report model — one ingestion event: a single benchmark run on one branch + testbed.

Immutable after creation. Owns its Metric rows.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from benchwatch.database import Base


class Report(Base):
    __tablename__ = 'reports'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False)
    branch_id = Column(Integer, ForeignKey('branches.id'), nullable=False)
    testbed_id = Column(Integer, ForeignKey('testbeds.id'), nullable=False)
    git_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('ix_reports_coordinate', 'project_id', 'branch_id', 'testbed_id', 'created_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'branch_id': self.branch_id,
            'testbed_id': self.testbed_id,
            'git_hash': self.git_hash,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
