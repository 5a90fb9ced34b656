"""
Dimension models — project-scoped named categories that tag every metric.

Rows are created lazily the first time a name is seen and are unique by
(project_id, name). Measures additionally carry an optional unit string.
"""
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from benchwatch.database import Base


class Branch(Base):
    __tablename__ = 'branches'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('project_id', 'name', name='uq_branch_project_name'),
    )


class Testbed(Base):
    __tablename__ = 'testbeds'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('project_id', 'name', name='uq_testbed_project_name'),
    )


class Benchmark(Base):
    __tablename__ = 'benchmarks'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('project_id', 'name', name='uq_benchmark_project_name'),
    )


class Measure(Base):
    __tablename__ = 'measures'

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id'), nullable=False)
    name = Column(Text, nullable=False)
    units = Column(Text, nullable=True)   # ns / ops/s / bytes ...
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint('project_id', 'name', name='uq_measure_project_name'),
    )


# kind → model, used by the resolver
DIMENSION_MODELS = {
    'branch': Branch,
    'testbed': Testbed,
    'benchmark': Benchmark,
    'measure': Measure,
}
