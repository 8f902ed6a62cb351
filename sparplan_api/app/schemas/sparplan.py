"""
Pydantic schemas for savings plans (Sparpläne).

A savings plan invests a fixed ``monthly_amount`` into one ETF for
``term_years`` years.  The owner is never part of a request or a
response: it is taken from the authenticated identity when a plan is
created and cannot be changed afterwards.  Unknown fields in request
bodies, such as a client-supplied ``userId``, are ignored.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import Field, PlainSerializer, field_validator

from .base import CamelModel


ETF_NAME_MAX_LENGTH = 200
MAX_TERM_YEARS = 100

# Serialized as a JSON number (200.0) rather than pydantic's default string
MonthlyAmount = Annotated[
    Decimal,
    Field(gt=0, max_digits=12, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class SparplanWrite(CamelModel):
    """Body for creating or updating a savings plan.

    Only these three fields are mutable on an existing plan.
    """

    etf_name: str = Field(..., max_length=ETF_NAME_MAX_LENGTH, examples=["S&P 500"])
    monthly_amount: MonthlyAmount = Field(..., examples=[200.00])
    term_years: int = Field(..., ge=1, le=MAX_TERM_YEARS, examples=[15])

    @field_validator("etf_name")
    @classmethod
    def etf_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ETF name must not be blank")
        return value


class SparplanRead(CamelModel):
    """A stored savings plan as returned by the API."""

    id: int
    etf_name: str
    monthly_amount: MonthlyAmount
    term_years: int
    created_at: datetime
