# app/services/stats_service.py
"""
Dashboard statistics. Everything is counted from the tables on request;
nothing here is stored.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.actor import Actor
from app.models.alert import Alert
from app.models.alert_vote import AlertVote
from app.services import state_rules


def _count(q) -> int:
    return int(q.scalar() or 0)


def get_user_stats(db: Session, actor_id: str) -> dict:
    by_status = dict(
        db.query(Alert.status, func.count(Alert.id))
        .filter(Alert.author_id == actor_id)
        .group_by(Alert.status)
        .all()
    )
    return {
        "alerts_count": sum(by_status.values()),
        "validations_count": _count(db.query(func.count(AlertVote.id)).filter(AlertVote.voter_id == actor_id)),
        "confirmed_alerts_count": by_status.get(state_rules.CONFIRMED, 0),
        "fake_alerts_count": by_status.get(state_rules.FAKE, 0),
    }


def get_system_stats(db: Session) -> dict:
    by_status = dict(db.query(Alert.status, func.count(Alert.id)).group_by(Alert.status).all())
    return {
        "users_count": _count(db.query(func.count(Actor.id))),
        "alerts_count": sum(by_status.values()),
        "confirmed_alerts_count": by_status.get(state_rules.CONFIRMED, 0),
        "pending_alerts_count": by_status.get(state_rules.PENDING, 0),
        "resolved_alerts_count": by_status.get(state_rules.RESOLVED, 0),
        "validations_count": _count(db.query(func.count(AlertVote.id))),
    }
