# app/models/alert.py
"""
Alerts table — community-reported safety incidents.
confirmed_count / rejected_count are only ever written by the vote path,
recomputed from alert_votes. view is only ever incremented by the view tracker.
"""

from datetime import datetime
from uuid import uuid4
from sqlalchemy import Column, Integer, String, DateTime, Text, Float, JSON, ForeignKey
from app.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String(50), primary_key=True, default=lambda: str(uuid4()))
    reason = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=False, index=True)
    latitude = Column(Float)
    longitude = Column(Float)
    urgency = Column(String(10), nullable=False, default="medium", index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    author_id = Column(String(50), ForeignKey("actors.id", ondelete="CASCADE"), nullable=False, index=True)
    media = Column(JSON, nullable=False, default=list)
    confirmed_count = Column(Integer, nullable=False, default=0)
    rejected_count = Column(Integer, nullable=False, default=0)
    view = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    resolved_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return (f"<Alert {self.id} status={self.status} "
                f"votes={self.confirmed_count}/{self.rejected_count}>")
