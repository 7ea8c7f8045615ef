# app/models/alert_vote.py
"""
Vote ledger — one row per (alert, voter). Rows are never updated or deleted
except when their alert is deleted.
"""

from datetime import datetime
from uuid import uuid4
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, UniqueConstraint
from app.database import Base


class AlertVote(Base):
    __tablename__ = "alert_votes"
    __table_args__ = (
        UniqueConstraint("alert_id", "voter_id", name="alert_votes_unique"),
    )

    id = Column(String(50), primary_key=True, default=lambda: str(uuid4()))
    alert_id = Column(String(50), ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(50), ForeignKey("actors.id", ondelete="CASCADE"), nullable=False, index=True)
    is_confirmed = Column(Boolean, nullable=False)   # True = confirm, False = reject
    voted_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        verdict = "confirm" if self.is_confirmed else "reject"
        return f"<AlertVote alert={self.alert_id} voter={self.voter_id} {verdict}>"
