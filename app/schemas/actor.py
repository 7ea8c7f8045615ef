# app/schemas/actor.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ActorCreate(BaseModel):
    id: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    is_admin: bool = False


class AdminFlagUpdate(BaseModel):
    is_admin: bool


class ActorOut(BaseModel):
    id: str
    name: str
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True
