"""
Pydantic schemas package
"""

from .common import *
from .member import *
from .reservation import *
from .session import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "StoreResult",
    "MemberRecord",
    "MemberProfile",
    "MemberCreate",
    "MemberUpdate",
    "ProfileUpdate",
    "AccessRequest",
    "ReservationRecord",
    "SlotOption",
    "BookingStart",
    "SlotSelection",
    "BookingDetails",
    "SessionContext",
]
