# app/models/alert_view.py
"""
Alert views — evidence that an actor opened an alert.
The existence of a row is what stops alerts.view from being incremented twice.
"""

from datetime import datetime
from uuid import uuid4
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from app.database import Base


class AlertView(Base):
    __tablename__ = "alert_views"
    __table_args__ = (
        UniqueConstraint("alert_id", "viewer_id", name="alert_views_unique"),
    )

    id = Column(String(50), primary_key=True, default=lambda: str(uuid4()))
    alert_id = Column(String(50), ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_id = Column(String(50), ForeignKey("actors.id", ondelete="CASCADE"), nullable=False, index=True)
    viewed_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<AlertView alert={self.alert_id} viewer={self.viewer_id}>"
