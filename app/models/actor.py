# app/models/actor.py
"""
Actors table — the people who report, vote on and view alerts.
Owned by the identity collaborator; the alert engine only reads id and is_admin.
"""

from datetime import datetime
from uuid import uuid4
from sqlalchemy import Column, String, DateTime, Boolean
from app.database import Base


class Actor(Base):
    __tablename__ = "actors"

    id = Column(String(50), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(200), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Actor {self.id} name={self.name} admin={self.is_admin}>"
