"""
Metric model — one numeric observation for a (benchmark, measure) pair within a report.

(report_id, benchmark_id, measure_id) is deliberately not unique.
"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from benchwatch.database import Base


class Metric(Base):
    __tablename__ = 'metrics'

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_id = Column(Integer, ForeignKey('reports.id'), nullable=False, index=True)
    benchmark_id = Column(Integer, ForeignKey('benchmarks.id'), nullable=False)
    measure_id = Column(Integer, ForeignKey('measures.id'), nullable=False)
    value = Column(Float, nullable=False)
    lower_value = Column(Float, nullable=True)   # e.g. confidence interval low
    upper_value = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('ix_metrics_benchmark_measure', 'benchmark_id', 'measure_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'report_id': self.report_id,
            'benchmark_id': self.benchmark_id,
            'measure_id': self.measure_id,
            'value': self.value,
            'lower_value': self.lower_value,
            'upper_value': self.upper_value,
        }
