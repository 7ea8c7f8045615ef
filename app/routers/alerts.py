# app/routers/alerts.py
"""Community alerts — reporting, voting, resolution and view tracking."""

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.schemas.alert import (
    AlertCreate, AlertUpdate, AlertOut, AlertStatus, AuthorOut, VoteIn, StatusChange, ActorRef, ViewIn, ViewOut,
)
from app.services import alert_service
from typing import Optional

router = APIRouter()

NOT_FOUND_OR_UNAUTHORIZED = "Alert not found or unauthorized"


def _out(db: Session, alert) -> AlertOut:
    out = AlertOut.model_validate(alert)
    out.author = AuthorOut(**alert_service.describe_author(db, alert.author_id))
    return out


def _bearer_actor(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


@router.get("/alerts", response_model=list[AlertOut], summary="List alerts — newest first")
def list_alerts(
    status: Optional[AlertStatus] = None,
    author_id: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Filter by status and/or author."""
    alerts = alert_service.list_alerts(db, status=status, author_id=author_id,
                                       limit=limit or settings.DEFAULT_LIST_LIMIT)
    return [_out(db, a) for a in alerts]


@router.get("/alerts/{alert_id}", response_model=AlertOut, summary="Fetch one alert (counts a view)")
def get_alert(alert_id: str, authorization: Optional[str] = Header(default=None),
              db: Session = Depends(get_db)):
    """
    Returns the alert with its author.
    When called with `Authorization: Bearer <actor id>` the caller's first visit
    bumps the view counter.
    """
    alert = alert_service.get_alert(db, alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")

    viewer_id = _bearer_actor(authorization)
    if viewer_id and alert_service.record_view(db, alert_id, viewer_id):
        alert = alert_service.get_alert(db, alert_id)
    return _out(db, alert)


@router.post("/alerts", response_model=AlertOut, status_code=201, summary="Report an incident")
def create_alert(body: AlertCreate, db: Session = Depends(get_db)):
    alert = alert_service.create_alert(db, body.author_id, body.model_dump(exclude={"author_id"}))
    return _out(db, alert)


@router.put("/alerts/{alert_id}", response_model=AlertOut, summary="Edit alert content (author or admin)")
def update_alert(alert_id: str, body: AlertUpdate, db: Session = Depends(get_db)):
    alert = alert_service.update_content(db, alert_id, body.updater_id, body.changes())
    return _out(db, alert)


@router.post("/alerts/{alert_id}/validate", response_model=AlertOut, summary="Confirm or reject an alert")
def vote_on_alert(alert_id: str, body: VoteIn, db: Session = Depends(get_db)):
    """One vote per user. 3 confirms → confirmed, 2 rejects → fake."""
    alert = alert_service.vote(db, alert_id, body.user_id, body.is_confirmed)
    return _out(db, alert)


@router.put("/alerts/{alert_id}/status", response_model=AlertOut, summary="Mark an alert resolved (author only)")
def change_alert_status(alert_id: str, body: StatusChange, db: Session = Depends(get_db)):
    alert = alert_service.change_status(db, alert_id, body.author_id, body.status)
    return _out(db, alert)


@router.delete("/alerts/{alert_id}", summary="Delete an alert (author or admin)")
def delete_alert(alert_id: str, body: ActorRef, db: Session = Depends(get_db)):
    if not alert_service.delete_alert(db, alert_id, body.author_id):
        raise HTTPException(status_code=404, detail=NOT_FOUND_OR_UNAUTHORIZED)
    return {"success": True}


@router.post("/alerts/{alert_id}/views", response_model=ViewOut, summary="Record that a user opened an alert")
def record_alert_view(alert_id: str, body: ViewIn, db: Session = Depends(get_db)):
    incremented = alert_service.record_view(db, alert_id, body.viewer_id)
    return {"alert_id": alert_id, "viewer_id": body.viewer_id, "incremented": incremented}
