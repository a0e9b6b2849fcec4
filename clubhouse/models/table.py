"""
Static club tables
"""

from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class Table:
    id: int
    name: str
    color: str

TABLES = (
    Table(id=1, name="Mesa 1 - Sagredo", color="blue"),
    Table(id=2, name="Mesa 2 - Liern", color="red"),
    Table(id=3, name="Mesa 3 - Bailen", color="green"),
)

def get_table(table_id) -> Optional[Table]:
    """Find a table by id; accepts ints or numeric strings"""
    try:
        table_id = int(table_id)
    except (TypeError, ValueError):
        return None
    return next((t for t in TABLES if t.id == table_id), None)
