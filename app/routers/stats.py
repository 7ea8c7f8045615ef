# app/routers/stats.py
"""Dashboard counters — per user and system-wide."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.stats import UserStats, SystemStats
from app.services import stats_service

router = APIRouter()


@router.get("/stats/user/{actor_id}", response_model=UserStats, summary="Alerts and votes by one user")
def user_stats(actor_id: str, db: Session = Depends(get_db)):
    return stats_service.get_user_stats(db, actor_id)


@router.get("/stats/system", response_model=SystemStats, summary="System-wide totals")
def system_stats(db: Session = Depends(get_db)):
    return stats_service.get_system_stats(db)
