"""
Threshold model — a regression policy for one measure within a project.

branch_id / testbed_id = NULL means "applies to all". Boundaries are percent
changes; lower_boundary is stored as a positive magnitude.
"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey
from sqlalchemy.sql import func

from benchwatch.database import Base


class Threshold(Base):
    __tablename__ = 'thresholds'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False, index=True)
    branch_id = Column(Integer, ForeignKey('branches.id'), nullable=True)
    testbed_id = Column(Integer, ForeignKey('testbeds.id'), nullable=True)
    measure_id = Column(Integer, ForeignKey('measures.id'), nullable=False)
    upper_boundary = Column(Float, nullable=True)
    lower_boundary = Column(Float, nullable=True)
    min_sample_size = Column(Integer, nullable=False, default=2)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'branch_id': self.branch_id,
            'testbed_id': self.testbed_id,
            'measure_id': self.measure_id,
            'upper_boundary': self.upper_boundary,
            'lower_boundary': self.lower_boundary,
            'min_sample_size': self.min_sample_size,
        }
