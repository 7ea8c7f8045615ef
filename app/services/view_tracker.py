# app/services/view_tracker.py
"""
View deduplication — each (alert, viewer) pair bumps alerts.view at most once.

The AlertView insert and the counter increment are flushed in the same
transaction; the increment is done in SQL (view = view + 1) so it never
depends on a stale in-memory value. The caller commits or rolls back.
"""

from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.alert import Alert
from app.models.alert_view import AlertView


def has_viewed(db: Session, alert_id: str, viewer_id: str) -> bool:
    return db.query(AlertView.id).filter(
        AlertView.alert_id == alert_id, AlertView.viewer_id == viewer_id
    ).first() is not None


def record_view(db: Session, alert_id: str, viewer_id: str) -> bool:
    """Returns True if this call incremented the view counter."""
    if has_viewed(db, alert_id, viewer_id):
        return False

    savepoint = db.begin_nested()
    try:
        db.add(AlertView(alert_id=alert_id, viewer_id=viewer_id, viewed_at=datetime.utcnow()))
        db.flush()
    except IntegrityError:
        savepoint.rollback()
        return False

    db.query(Alert).filter(Alert.id == alert_id).update(
        {Alert.view: Alert.view + 1}, synchronize_session=False
    )
    savepoint.commit()
    return True
