"""
Tests for roster spreadsheet import and export
"""

import io
import pandas as pd

from clubhouse.schemas.member import MemberRecord
from clubhouse.services.roster_service import RosterService

def create_test_excel(data):
    """Helper function to create Excel bytes from data"""
    df = pd.DataFrame(data)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False)
    return buffer.getvalue()

def test_template_round_trips():
    ok, names, errors = RosterService.read_names(RosterService.create_template())

    assert ok
    assert names == ['Nombre Apellido 1', 'Nombre Apellido 2']
    assert errors == []

def test_read_names_case_insensitive_column():
    content = create_test_excel({'NAME ': ['Ana', 'Luis']})

    ok, names, errors = RosterService.read_names(content)

    assert ok
    assert names == ['Ana', 'Luis']

def test_read_names_skips_blanks_and_duplicates():
    content = create_test_excel({'Nombre': ['Ana', None, '  Luis ', 'Ana', '']})

    ok, names, errors = RosterService.read_names(content)

    assert ok
    assert names == ['Ana', 'Luis']

def test_read_names_from_csv():
    content = "nombre,telefono\nAna,600\nMarta,601\n".encode("utf-8")

    ok, names, errors = RosterService.read_names(content, "socios.csv")

    assert ok
    assert names == ['Ana', 'Marta']

def test_read_names_missing_column():
    ok, names, errors = RosterService.read_names(create_test_excel({'Socio': ['Ana']}))

    assert not ok
    assert names == []
    assert 'Nombre' in errors[0]

def test_read_names_unreadable_file():
    ok, names, errors = RosterService.read_names(b"not a spreadsheet", "socios.xlsx")

    assert not ok
    assert errors[0].startswith("Error leyendo el archivo")

def test_export_members():
    members = [
        MemberRecord(id="1", name="Ana", access_code="1234", is_admin=True),
        MemberRecord(id="2", name="Luis", access_code="5678"),
    ]

    df = pd.read_excel(io.BytesIO(RosterService.export_members(members)), dtype=str)

    assert list(df.columns) == ['Nombre', 'Código', 'Admin', 'Foto']
    assert df['Nombre'].tolist() == ['Ana', 'Luis']
    assert df['Código'].tolist() == ['1234', '5678']
    assert df['Admin'].tolist() == ['Sí', 'No']
