"""
Excel processing service for the member roster (seed import / export)
"""

import io
from typing import List, Tuple
import pandas as pd

from clubhouse.schemas.member import MemberRecord

class RosterService:
    """Service for handling member roster spreadsheets"""

    NAME_COLUMNS = ['name', 'nombre']

    @staticmethod
    def create_template() -> bytes:
        """Create Excel template with the name column"""
        df = pd.DataFrame({'Nombre': ['Nombre Apellido 1', 'Nombre Apellido 2']})

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Socios')

        return buffer.getvalue()

    @staticmethod
    def find_name_column(df: pd.DataFrame):
        for col in df.columns:
            if str(col).lower().strip() in RosterService.NAME_COLUMNS:
                return col
        return None

    @staticmethod
    def read_names(file_content: bytes, filename: str = "roster.xlsx") -> Tuple[bool, List[str], List[str]]:
        """Parse a roster file; returns (ok, names, errors)"""
        try:
            if filename.lower().endswith('.csv'):
                df = pd.read_csv(io.BytesIO(file_content))
            else:
                df = pd.read_excel(io.BytesIO(file_content))
        except Exception as e:
            return False, [], [f"Error leyendo el archivo: {str(e)}"]

        name_col = RosterService.find_name_column(df)
        if name_col is None:
            return False, [], ["Falta la columna obligatoria: Nombre"]

        names = []
        seen = set()
        for value in df[name_col]:
            # Skip empty rows and repeated names
            if pd.isna(value):
                continue
            name = str(value).strip()
            if not name or name in seen:
                continue
            seen.add(name)
            names.append(name)

        if not names:
            return False, [], ["El archivo no contiene nombres"]
        return True, names, []

    @staticmethod
    def export_members(members: List[MemberRecord]) -> bytes:
        """Export the roster with access codes for distribution"""
        df = pd.DataFrame([
            {
                'Nombre': m.name,
                'Código': m.access_code,
                'Admin': 'Sí' if m.is_admin else 'No',
                'Foto': m.photo_url or '',
            }
            for m in members
        ], columns=['Nombre', 'Código', 'Admin', 'Foto'])

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Socios')

        return buffer.getvalue()
