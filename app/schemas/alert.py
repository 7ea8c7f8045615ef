# app/schemas/alert.py
"""
Request and response models for the alert endpoints.
Every mutating operation has its own validated input model; malformed bodies
are rejected here before anything touches the vote ledger or the counters.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, Literal

Urgency = Literal["low", "medium", "high"]
AlertStatus = Literal["pending", "confirmed", "fake", "resolved"]
MEDIA_PREFIXES = ("http://", "https://", "/uploads/")


class AlertCreate(BaseModel):
    reason: str = Field(min_length=1)
    description: str = Field(min_length=1, max_length=1000)
    location: str = Field(min_length=1)
    urgency: Urgency = "medium"
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    media: list[str] = []
    author_id: str = Field(min_length=1)

    @field_validator("media")
    @classmethod
    def media_are_urls(cls, value: list[str]) -> list[str]:
        """Remote http(s) URLs, or /uploads/ paths served by this backend."""
        for url in value:
            if not url.startswith(MEDIA_PREFIXES) or url == "/uploads/":
                raise ValueError(f"media entry is not an http(s) URL or /uploads/ path: {url}")
        return value


class AlertUpdate(BaseModel):
    """Content edit. Only the fields listed here can ever be changed after creation."""
    updater_id: str = Field(min_length=1)
    reason: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    location: Optional[str] = Field(default=None, min_length=1)
    urgency: Optional[Urgency] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    model_config = {"extra": "forbid"}

    @model_validator(mode="after")
    def required_columns_not_nulled(self):
        for name in ("reason", "description", "location", "urgency"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"updater_id"})


class VoteIn(BaseModel):
    is_confirmed: bool
    user_id: str = Field(min_length=1)


class StatusChange(BaseModel):
    status: AlertStatus
    author_id: str = Field(min_length=1)


class ActorRef(BaseModel):
    """Body for operations that only need to know who is acting (delete)."""
    author_id: str = Field(min_length=1)


class ViewIn(BaseModel):
    viewer_id: str = Field(min_length=1)


class AuthorOut(BaseModel):
    id: str
    name: str


class AlertOut(BaseModel):
    id: str
    reason: str
    description: str
    location: str
    latitude: Optional[float]
    longitude: Optional[float]
    urgency: str
    status: str
    author_id: str
    media: list[str]
    confirmed_count: int
    rejected_count: int
    view: int
    created_at: datetime
    resolved_at: Optional[datetime]
    updated_at: Optional[datetime]
    author: Optional[AuthorOut] = None

    class Config:
        from_attributes = True


class ViewOut(BaseModel):
    alert_id: str
    viewer_id: str
    incremented: bool
