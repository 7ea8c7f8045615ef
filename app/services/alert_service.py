# app/services/alert_service.py
"""
Alert service — the operations the HTTP layer calls.

Each mutating operation is one unit of work: it runs under the alert's
in-process lock, reloads the alert row FOR UPDATE (PostgreSQL), and either
commits everything or rolls everything back. The vote path is

    authorize → vote_ledger.cast_vote → vote_counter.recompute → state_rules.next_state → commit

so two voters on the same alert can never lose each other's vote, and a voter
retrying a vote that already committed gets DuplicateVoteError.
"""

from contextlib import contextmanager
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.config import settings
from app.models.alert import Alert
from app.models.alert_vote import AlertVote
from app.models.alert_view import AlertView
from app.services import state_rules, view_tracker
from app.services.authorization import authorize, disallowed_fields, RESOLVE, UPDATE, DELETE, VOTE
from app.services.errors import (
    AlertEngineError, NotFoundError, ForbiddenError, VotingClosedError, ValidationError, StorageError,
)
from app.services.identity_service import get_actor, get_actor_record
from app.services.vote_counter import recompute, apply_counts
from app.services.vote_ledger import cast_vote
from app.utils.keyed_lock import KeyedLock
from app.utils.logger import get_logger

logger = get_logger(__name__)

URGENCY_LEVELS = ("low", "medium", "high")
REQUIRED_FIELDS = ("reason", "description", "location")
MAX_DESCRIPTION_LENGTH = 1000

_alert_locks = KeyedLock()


@contextmanager
def _unit_of_work(db: Session, alert_id: str):
    """Serialize on the alert, commit on success, roll back on anything else."""
    with _alert_locks.hold(alert_id):
        if db.in_transaction():
            # A read left open by the caller would pin a snapshot taken before the lock.
            # Unsaved caller changes are discarded, never committed alongside this unit.
            if db.new or db.dirty or db.deleted:
                db.rollback()
            else:
                db.commit()
        try:
            yield
            db.commit()
        except AlertEngineError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[ALERT] Storage failure on {alert_id}: {e}", exc_info=True)
            raise StorageError(str(e)) from e
        except Exception:
            db.rollback()
            raise


def _load_for_update(db: Session, alert_id: str) -> Optional[Alert]:
    return (db.query(Alert)
            .filter(Alert.id == alert_id)
            .populate_existing()
            .with_for_update()
            .first())


def _check_content(fields: dict, creating: bool = False):
    """Engine-side guard for callers that bypass the pydantic schemas."""
    if creating:
        missing = [f for f in REQUIRED_FIELDS if not fields.get(f)]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    for name in REQUIRED_FIELDS:
        if name in fields and not fields[name]:
            raise ValidationError(f"{name} cannot be empty")
    if len(fields.get("description") or "") > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"description exceeds {MAX_DESCRIPTION_LENGTH} characters")
    urgency = fields.get("urgency")
    if urgency is None and "urgency" in fields and not creating:
        raise ValidationError("urgency cannot be empty")
    if urgency is not None and urgency not in URGENCY_LEVELS:
        raise ValidationError(f"urgency must be one of {', '.join(URGENCY_LEVELS)}")
    lat, lon = fields.get("latitude"), fields.get("longitude")
    if lat is not None and not -90 <= lat <= 90:
        raise ValidationError("latitude must be between -90 and 90")
    if lon is not None and not -180 <= lon <= 180:
        raise ValidationError("longitude must be between -180 and 180")


# ── Reads ────────────────────────────────────────────────────────────────────

def get_alert(db: Session, alert_id: str) -> Optional[Alert]:
    return db.query(Alert).filter(Alert.id == alert_id).first()


def list_alerts(db: Session, status: Optional[str] = None, author_id: Optional[str] = None,
                limit: Optional[int] = None) -> list:
    """Newest first, optionally filtered by status and/or author."""
    q = db.query(Alert)
    if status:
        q = q.filter(Alert.status == status)
    if author_id:
        q = q.filter(Alert.author_id == author_id)
    q = q.order_by(Alert.created_at.desc())
    if limit:
        q = q.limit(limit)
    return q.all()


def describe_author(db: Session, author_id: str) -> dict:
    """Author summary embedded in alert responses."""
    author = get_actor_record(db, author_id)
    if author is None:
        return {"id": "unknown", "name": "Unknown user"}
    return {"id": author.id, "name": author.name}


# ── Mutations ────────────────────────────────────────────────────────────────

def create_alert(db: Session, author_id: str, fields: dict) -> Alert:
    """Create a pending alert with zeroed counters."""
    _check_content(fields, creating=True)
    author = get_actor(db, author_id)
    if author is None:
        raise NotFoundError("Actor", author_id)

    alert = Alert(
        reason=fields["reason"],
        description=fields["description"],
        location=fields["location"],
        latitude=fields.get("latitude"),
        longitude=fields.get("longitude"),
        urgency=fields.get("urgency") or "medium",
        media=list(fields.get("media") or []),
        author_id=author.id,
        status=state_rules.PENDING,
        confirmed_count=0,
        rejected_count=0,
        view=0,
        created_at=datetime.utcnow(),
    )
    db.add(alert)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[ALERT] Could not create alert for {author.id}: {e}", exc_info=True)
        raise StorageError(str(e)) from e
    db.refresh(alert)
    logger.info(f"[ALERT] {alert.id} created by {author.id} ({alert.reason}, {alert.urgency})")
    return alert


def vote(db: Session, alert_id: str, voter_id: str, confirm: bool) -> Alert:
    """Record a confirm/reject vote and move the alert along its lifecycle."""
    policy = settings.VOTING_POLICY
    with _unit_of_work(db, alert_id):
        voter = get_actor(db, voter_id)
        if voter is None:
            raise NotFoundError("Actor", voter_id)
        alert = _load_for_update(db, alert_id)
        if alert is None or not authorize(voter, alert, VOTE):
            raise NotFoundError("Alert", alert_id)
        if not state_rules.accepts_votes(alert.status, policy):
            raise VotingClosedError(alert.id, alert.status)

        cast_vote(db, alert.id, voter.id, confirm)
        confirmed, rejected = recompute(db, alert.id)
        apply_counts(alert, confirmed, rejected)

        new_status = state_rules.next_state(
            alert.status, confirmed, rejected, policy=policy,
            confirm_threshold=settings.CONFIRM_THRESHOLD,
            fake_threshold=settings.FAKE_THRESHOLD,
        )
        if new_status != alert.status:
            logger.info(f"[VOTE] {alert.id}: {alert.status} → {new_status} ({confirmed}/{rejected})")
            alert.status = new_status
        alert.updated_at = datetime.utcnow()

    logger.debug(f"[VOTE] {voter.id} {'confirmed' if confirm else 'rejected'} {alert_id}")
    return alert


def change_status(db: Session, alert_id: str, actor_id: str, new_status: str) -> Alert:
    """Author-only transition to "resolved". Other statuses are owned by the vote path."""
    if new_status not in state_rules.ALERT_STATUSES:
        raise ValidationError(f"Unknown status: {new_status}")
    if new_status != state_rules.RESOLVED:
        raise ValidationError("Only 'resolved' can be set explicitly")

    with _unit_of_work(db, alert_id):
        actor = get_actor(db, actor_id)
        alert = _load_for_update(db, alert_id)
        if alert is None:
            raise NotFoundError("Alert", alert_id)
        if not authorize(actor, alert, RESOLVE):
            raise ForbiddenError(actor_id, alert_id, RESOLVE)

        if alert.status != state_rules.RESOLVED:
            now = datetime.utcnow()
            alert.status = state_rules.RESOLVED
            alert.resolved_at = now
            alert.updated_at = now
            logger.info(f"[ALERT] {alert.id} resolved by {actor_id}")
    return alert


def update_content(db: Session, alert_id: str, actor_id: str, fields: dict) -> Alert:
    """Edit allow-listed content fields as the author or an admin."""
    forbidden = disallowed_fields(fields)
    if forbidden:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(forbidden))}")
    _check_content(fields)

    with _unit_of_work(db, alert_id):
        actor = get_actor(db, actor_id)
        alert = _load_for_update(db, alert_id)
        if alert is None:
            raise NotFoundError("Alert", alert_id)
        if not authorize(actor, alert, UPDATE):
            raise ForbiddenError(actor_id, alert_id, UPDATE)

        for name, value in fields.items():
            setattr(alert, name, value)
        alert.updated_at = datetime.utcnow()
    logger.info(f"[ALERT] {alert_id} updated by {actor_id}: {sorted(fields)}")
    return alert


def delete_alert(db: Session, alert_id: str, actor_id: str) -> bool:
    """Remove an alert with its votes and views. False means not found or not allowed."""
    deleted = False
    with _unit_of_work(db, alert_id):
        actor = get_actor(db, actor_id)
        alert = _load_for_update(db, alert_id)
        if alert is not None and authorize(actor, alert, DELETE):
            db.query(AlertVote).filter(AlertVote.alert_id == alert_id).delete(synchronize_session=False)
            db.query(AlertView).filter(AlertView.alert_id == alert_id).delete(synchronize_session=False)
            db.delete(alert)
            deleted = True

    if deleted:
        logger.info(f"[ALERT] {alert_id} deleted by {actor_id}")
    return deleted


def record_view(db: Session, alert_id: str, viewer_id: str) -> bool:
    """Count a view once per (alert, viewer). Returns True if the counter moved."""
    with _unit_of_work(db, alert_id):
        if get_actor(db, viewer_id) is None or get_alert(db, alert_id) is None:
            return False
        incremented = view_tracker.record_view(db, alert_id, viewer_id)
    return incremented
