"""Schemas for the public service endpoints (health probe, ETF catalogue)."""

from datetime import datetime

from pydantic import BaseModel


class HealthRead(BaseModel):
    status: str
    service: str
    timestamp: datetime


class EtfRead(BaseModel):
    """An ETF offered for savings plans.  ``ter`` is the total expense ratio in percent."""

    id: int
    name: str
    isin: str
    ter: float
