"""
Reservation-related Pydantic schemas
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, field_validator

class ReservationRecord(BaseModel):
    """Reservation row as returned by the data service"""
    id: str
    table_id: int
    date: date
    time: str
    customer_name: str
    member_id: str = ""
    mobile: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("member_id", mode="before")
    @classmethod
    def _null_member(cls, value):
        return "" if value is None else str(value)

    class Config:
        from_attributes = True

    @property
    def slot(self) -> tuple:
        return (self.table_id, self.date, self.time)

class SlotOption(BaseModel):
    """One hourly label offered by the booking flow"""
    time: str
    occupied: bool
    past: bool

    @property
    def disabled(self) -> bool:
        return self.occupied or self.past

class BookingStart(BaseModel):
    table_id: int

class SlotSelection(BaseModel):
    date: str
    time: str
    mobile: Optional[str] = None

class BookingDetails(BaseModel):
    name: str
    member_id: str = ""
    mobile: Optional[str] = None
