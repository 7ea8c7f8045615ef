# app/services/vote_ledger.py
"""
Vote ledger — append-only (alert, voter, verdict) records.

One vote per voter per alert: checked before the insert, and enforced by the
alert_votes_unique constraint for writers this process cannot see. A racing
insert that trips the constraint is rolled back to its savepoint and reported
as a duplicate, so the caller's transaction has no partial vote in it.
"""

from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.alert_vote import AlertVote
from app.services.errors import DuplicateVoteError


def find_vote(db: Session, alert_id: str, voter_id: str):
    return db.query(AlertVote).filter(
        AlertVote.alert_id == alert_id, AlertVote.voter_id == voter_id
    ).first()


def cast_vote(db: Session, alert_id: str, voter_id: str, verdict: bool) -> AlertVote:
    """Insert a vote row. Raises DuplicateVoteError if the pair already voted."""
    if find_vote(db, alert_id, voter_id) is not None:
        raise DuplicateVoteError(alert_id, voter_id)

    vote = AlertVote(alert_id=alert_id, voter_id=voter_id,
                     is_confirmed=bool(verdict), voted_at=datetime.utcnow())
    savepoint = db.begin_nested()
    try:
        db.add(vote)
        db.flush()
    except IntegrityError:
        savepoint.rollback()
        raise DuplicateVoteError(alert_id, voter_id)
    savepoint.commit()
    return vote
