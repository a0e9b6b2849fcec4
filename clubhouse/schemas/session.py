"""
Session context schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel

class SessionContext(BaseModel):
    """Login state of one browser, persisted by the session registry"""
    token: str
    member_id: str
    member_name: str
    access_code: str
    photo_url: Optional[str] = None
    is_admin: bool = False
    granted_at: datetime
