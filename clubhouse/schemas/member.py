"""
Member-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_validator

class MemberRecord(BaseModel):
    """Member row as returned by the data service"""
    id: str
    name: str
    access_code: str
    is_admin: bool = False
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("is_admin", mode="before")
    @classmethod
    def _null_is_false(cls, value):
        return bool(value)

    class Config:
        from_attributes = True

class MemberProfile(BaseModel):
    """Public profile returned by a successful access check"""
    id: str
    name: str
    code: str
    is_admin: bool = False
    photo_url: Optional[str] = None

class MemberCreate(BaseModel):
    """Schema for creating a member"""
    name: str

class MemberUpdate(BaseModel):
    """Schema for updating a member"""
    name: Optional[str] = None
    photo_url: Optional[str] = None
    is_admin: Optional[bool] = None

class ProfileUpdate(BaseModel):
    """Fields a member may change on their own profile"""
    name: Optional[str] = None

class AccessRequest(BaseModel):
    """Access code submission"""
    code: str
