"""
Alert model — record of a detected regression.

References one Threshold and one Metric. Deleting the threshold deletes its alerts.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from benchwatch.config import ALERT_ACTIVE
from benchwatch.database import Base


class Alert(Base):
    __tablename__ = 'alerts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    threshold_id = Column(Integer, ForeignKey('thresholds.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    metric_id = Column(Integer, ForeignKey('metrics.id'), nullable=False, index=True)
    baseline_value = Column(Float, nullable=False)
    percent_change = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default=ALERT_ACTIVE)   # active/dismissed/resolved
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'threshold_id': self.threshold_id,
            'metric_id': self.metric_id,
            'baseline_average': self.baseline_value,
            'percent_change': self.percent_change,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
