# app/schemas/stats.py
from pydantic import BaseModel


class UserStats(BaseModel):
    alerts_count: int = 0
    validations_count: int = 0
    confirmed_alerts_count: int = 0
    fake_alerts_count: int = 0


class SystemStats(BaseModel):
    users_count: int = 0
    alerts_count: int = 0
    confirmed_alerts_count: int = 0
    pending_alerts_count: int = 0
    resolved_alerts_count: int = 0
    validations_count: int = 0
