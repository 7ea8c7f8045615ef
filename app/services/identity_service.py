# app/services/identity_service.py
"""
Identity collaborator — actor lookup for the alert engine.

get_actor() is a read-through lookup backed by ActorCache. The cache only holds
the {id, is_admin} capability value, never ORM rows, and every write to an
actor invalidates its entry. The alert engine treats get_actor() as a plain
lookup and knows nothing about the cache.
"""

import threading
import time
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.config import settings
from app.models.actor import Actor
from app.services.authorization import ActorRef
from app.services.errors import ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class ActorCache:
    """TTL cache of ActorRef values keyed by actor id."""

    def __init__(self, ttl_seconds: float, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple] = {}
        self._lock = threading.Lock()

    def get(self, actor_id: str) -> Optional[ActorRef]:
        with self._lock:
            entry = self._entries.get(actor_id)
            if entry is None:
                return None
            ref, stored_at = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[actor_id]
                return None
            return ref

    def put(self, ref: ActorRef):
        with self._lock:
            self._entries[ref.id] = (ref, self._clock())

    def invalidate(self, actor_id: str):
        with self._lock:
            self._entries.pop(actor_id, None)

    def clear(self):
        with self._lock:
            self._entries.clear()


actor_cache = ActorCache(settings.ACTOR_CACHE_TTL_SECONDS)


def get_actor(db: Session, actor_id: str, cache: ActorCache = actor_cache) -> Optional[ActorRef]:
    """Look up an actor's capability value. Returns None if the id is unknown."""
    if not actor_id:
        return None
    cached = cache.get(actor_id)
    if cached is not None:
        return cached

    row = db.query(Actor.id, Actor.is_admin).filter(Actor.id == actor_id).first()
    if row is None:
        return None
    ref = ActorRef(id=row.id, is_admin=bool(row.is_admin))
    cache.put(ref)
    return ref


def get_actor_record(db: Session, actor_id: str) -> Optional[Actor]:
    return db.query(Actor).filter(Actor.id == actor_id).first()


def create_actor(db: Session, name: str, is_admin: bool = False, actor_id: Optional[str] = None) -> Actor:
    actor = Actor(name=name, is_admin=is_admin, created_at=datetime.utcnow())
    if actor_id:
        actor.id = actor_id
    db.add(actor)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Actor id {actor_id} is already taken")
    db.refresh(actor)
    actor_cache.invalidate(actor.id)
    logger.info(f"[IDENTITY] Actor {actor.id} registered (admin={actor.is_admin})")
    return actor


def set_admin(db: Session, actor_id: str, is_admin: bool) -> Optional[Actor]:
    actor = get_actor_record(db, actor_id)
    if actor is None:
        return None
    actor.is_admin = is_admin
    actor.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(actor)
    actor_cache.invalidate(actor_id)
    logger.info(f"[IDENTITY] Actor {actor_id} admin flag set to {is_admin}")
    return actor
