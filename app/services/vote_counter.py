# app/services/vote_counter.py
"""
Aggregate counter — confirmed/rejected totals derived from the vote ledger.
Always a full recount, never an increment, so the alert's counters can be
rebuilt from alert_votes at any time.
"""

from typing import Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.alert_vote import AlertVote


def recompute(db: Session, alert_id: str) -> Tuple[int, int]:
    """Return (confirmed, rejected) for an alert as currently seen by this session."""
    rows = (db.query(AlertVote.is_confirmed, func.count(AlertVote.id))
            .filter(AlertVote.alert_id == alert_id)
            .group_by(AlertVote.is_confirmed)
            .all())
    confirmed = rejected = 0
    for is_confirmed, n in rows:
        if is_confirmed:
            confirmed = n
        else:
            rejected = n
    return confirmed, rejected


def apply_counts(alert, confirmed: int, rejected: int):
    alert.confirmed_count = confirmed
    alert.rejected_count = rejected
    return alert
