"""
Pydantic models for fine records.

Fields are declared in the order clients are told about missing ones:
when several required fields are absent, the first one listed here is
reported.  Unknown fields in request bodies are ignored.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class FineStatus(str, Enum):
    UNPAID = "unpaid"
    OVERDUE = "overdue"
    PAID = "paid"


class FineCreate(BaseModel):
    """Schema for creating a fine."""

    offender_name: str = Field(..., description="Full name of the offender")
    offence_type: str = Field(..., description="Offence committed, e.g. Speeding")
    fine_amount: float = Field(..., description="Amount before any surcharge")
    date_issued: date = Field(..., description="Date the fine was issued (YYYY-MM-DD)")
    # null is treated like an omitted status
    status: Optional[FineStatus] = Field(FineStatus.UNPAID, description="unpaid, overdue or paid")


class FineReplace(BaseModel):
    """Schema for a full update; every field must be sent."""

    offender_name: str
    offence_type: str
    fine_amount: float
    date_issued: date
    status: FineStatus


class FineUpdate(BaseModel):
    """Schema for a partial update.

    All fields are optional; only the ones provided (and not ``null``)
    are written.
    """

    offender_name: Optional[str] = None
    offence_type: Optional[str] = None
    fine_amount: Optional[float] = None
    date_issued: Optional[date] = None
    status: Optional[FineStatus] = None


class FineRead(BaseModel):
    """Schema for reading a fine."""

    fine_id: int
    offender_name: str
    offence_type: str
    fine_amount: float
    date_issued: date
    status: FineStatus

    model_config = {
        "from_attributes": True,
    }


class FineList(BaseModel):
    """A page of fines, newest first."""

    data: List[FineRead]
    limit: int
    offset: int
