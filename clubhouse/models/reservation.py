"""
Reservation model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, UniqueConstraint

from clubhouse.core.db import Base

class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    table_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)  # "HH:MM"
    customer_name = Column(String(255), nullable=False)
    member_id = Column(String(36), default="", nullable=False)
    mobile = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # One reservation per slot
    __table_args__ = (
        UniqueConstraint("table_id", "date", "time", name="uq_reservation_slot"),
    )
