# app/routers/actors.py
"""Identity endpoints — just enough to register people and grant admin rights."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.actor import ActorCreate, ActorOut, AdminFlagUpdate
from app.services import identity_service

router = APIRouter()


@router.post("/actors", response_model=ActorOut, status_code=201, summary="Register an actor")
def register_actor(body: ActorCreate, db: Session = Depends(get_db)):
    return identity_service.create_actor(db, body.name, is_admin=body.is_admin, actor_id=body.id)


@router.get("/actors/{actor_id}", response_model=ActorOut, summary="Look up an actor")
def get_actor(actor_id: str, db: Session = Depends(get_db)):
    actor = identity_service.get_actor_record(db, actor_id)
    if not actor:
        raise HTTPException(status_code=404, detail="Actor not found")
    return actor


@router.put("/actors/{actor_id}/admin", response_model=ActorOut, summary="Grant or revoke admin rights")
def set_admin_flag(actor_id: str, body: AdminFlagUpdate, db: Session = Depends(get_db)):
    actor = identity_service.set_admin(db, actor_id, body.is_admin)
    if not actor:
        raise HTTPException(status_code=404, detail="Actor not found")
    return actor
