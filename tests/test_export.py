import csv
import io
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from backend.nightnurse.db.store import RecordStore
from backend.nightnurse.services.export_service import (
    CAREGIVER_COLUMNS,
    NEWSLETTER_COLUMNS,
    export_csv,
    export_filename,
    format_cell,
    rows_to_csv,
)


def test_format_cell():
    assert format_cell("notes", None) == ""
    assert format_cell("is_duplicate", True) == "Yes"
    assert format_cell("is_duplicate", False) == "No"
    assert format_cell("created_at", datetime(2026, 3, 4, 5, 6, 7, 890)) == "2026-03-04T05:06:07"
    assert format_cell("certifications", "cpr,doula , ncs") == "cpr, doula, ncs"
    assert format_cell("id", 12) == "12"


def test_rows_to_csv_quotes_awkward_text():
    row = SimpleNamespace(id=1, email="a@example.com", created_at=datetime(2026, 1, 2, 3, 4, 5))
    tricky = SimpleNamespace(id=2, email='x,"y"\nz', created_at=datetime(2026, 1, 2, 3, 4, 5))
    content = rows_to_csv([row, tricky], NEWSLETTER_COLUMNS)

    rows = list(csv.reader(io.StringIO(content.decode("utf-8"))))
    assert rows == [
        ["ID", "Email", "Created At"],
        ["1", "a@example.com", "2026-01-02T03:04:05"],
        ["2", 'x,"y"\nz', "2026-01-02T03:04:05"],
    ]


def test_caregiver_headers():
    assert [title for _, title in CAREGIVER_COLUMNS] == [
        "ID",
        "Date",
        "Name",
        "Email",
        "Phone",
        "Base Location",
        "Willing Regions",
        "Experience",
        "Certifications",
        "Availability",
        "Experience Summary",
        "Duplicate",
    ]


def test_empty_export_has_header_only(tmp_path):
    store = RecordStore(f"sqlite:///{tmp_path / 'export.db'}")
    store.open()
    try:
        content = export_csv(store, "caregivers")
    finally:
        store.close()
    assert content.decode("utf-8").splitlines() == [",".join(title for _, title in CAREGIVER_COLUMNS)]


def test_unknown_export_kind():
    with pytest.raises(ValueError):
        export_csv(None, "invoices")


def test_export_filename():
    assert export_filename("parents", date(2026, 10, 18)) == "tahoe_night_nurse_parents_2026-10-18.csv"
