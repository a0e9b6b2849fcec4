"""
Member model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime

from clubhouse.core.db import Base

class Member(Base):
    __tablename__ = "members"

    id = Column(String(36), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(255), nullable=False, index=True)
    # Not unique: codes are drawn at random without a collision check
    access_code = Column(String(4), nullable=False, index=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    photo_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
