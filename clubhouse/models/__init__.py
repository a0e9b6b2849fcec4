"""
Database models package
"""

from .member import Member
from .reservation import Reservation
from .session import MemberSession
from .table import Table, TABLES, get_table

__all__ = ["Member", "MemberSession", "Reservation", "Table", "TABLES", "get_table"]
