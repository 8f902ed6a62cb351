"""
Public service endpoints.

``/health`` lets the frontend and monitoring check that the service is
up without touching any business logic.  ``/etfs`` returns the static
catalogue of ETFs offered when creating a savings plan.
"""

from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter

from sparplan_api.app.schemas.info import EtfRead, HealthRead

router = APIRouter()

SERVICE_NAME = "etf-sparplaner-backend"

ETF_CATALOGUE: List[EtfRead] = [
    EtfRead(id=1, name="iShares Core MSCI World", isin="IE00B4L5Y983", ter=0.20),
    EtfRead(id=2, name="Vanguard FTSE All-World", isin="IE00B3RBWM25", ter=0.22),
    EtfRead(id=3, name="Xtrackers MSCI EM IMI", isin="IE00BTJRMP35", ter=0.18),
]


@router.get("/health", response_model=HealthRead)
async def health() -> HealthRead:
    return HealthRead(status="UP", service=SERVICE_NAME, timestamp=datetime.now(timezone.utc))


@router.get("/etfs", response_model=List[EtfRead])
async def list_etfs() -> List[EtfRead]:
    return ETF_CATALOGUE
