"""
Login session model
"""

from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime

from clubhouse.core.db import Base

class MemberSession(Base):
    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    member_id = Column(String(36), nullable=False, index=True)
    member_name = Column(String(255), nullable=False)
    access_code = Column(String(4), nullable=False)
    photo_url = Column(String(1024), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    granted_at = Column(DateTime, default=datetime.utcnow)
