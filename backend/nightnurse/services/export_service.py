"""CSV exports of stored submissions for the admin area."""

import csv
import io
from datetime import date, datetime
from typing import Iterable, Optional

from backend.nightnurse.core.choices import split_selections
from backend.nightnurse.db.store import RecordFilters, RecordStore

PARENT_COLUMNS = [
    ("id", "ID"),
    ("created_at", "Date"),
    ("full_name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("location", "Location"),
    ("due_or_age", "Due/Age"),
    ("start_timeframe", "Start Timeframe"),
    ("notes", "Notes"),
    ("is_duplicate", "Duplicate"),
]

CAREGIVER_COLUMNS = [
    ("id", "ID"),
    ("created_at", "Date"),
    ("full_name", "Name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("base_location", "Base Location"),
    ("willing_regions", "Willing Regions"),
    ("experience_years", "Experience"),
    ("certifications", "Certifications"),
    ("availability_notes", "Availability"),
    ("experience_summary", "Experience Summary"),
    ("is_duplicate", "Duplicate"),
]

NEWSLETTER_COLUMNS = [
    ("id", "ID"),
    ("email", "Email"),
    ("created_at", "Created At"),
]

EXPORT_COLUMNS = {
    "parents": PARENT_COLUMNS,
    "caregivers": CAREGIVER_COLUMNS,
    "newsletter": NEWSLETTER_COLUMNS,
}

# Columns stored as delimited text; re-joined so the cell reads "a, b"
SELECTION_COLUMNS = {"willing_regions", "certifications"}


def format_cell(field: str, value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if field in SELECTION_COLUMNS:
        return ", ".join(split_selections(value))
    return str(value)


def rows_to_csv(rows: Iterable, columns: list[tuple[str, str]]) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([title for _, title in columns])
    for row in rows:
        writer.writerow([format_cell(field, getattr(row, field)) for field, _ in columns])
    return buf.getvalue().encode("utf-8")


def export_csv(store: RecordStore, kind: str, filters: Optional[RecordFilters] = None) -> bytes:
    """Serialize one record kind to CSV, newest first, honoring the listing filters."""
    filters = filters or RecordFilters()
    if kind == "parents":
        rows = store.query_parent_leads(filters)
    elif kind == "caregivers":
        rows = store.query_caregiver_applications(filters)
    elif kind == "newsletter":
        rows = store.list_newsletter_subscribers(limit=filters.limit)
    else:
        raise ValueError(f"Unknown export kind: {kind}")
    return rows_to_csv(rows, EXPORT_COLUMNS[kind])


def export_filename(kind: str, today: date) -> str:
    return f"tahoe_night_nurse_{kind}_{today.isoformat()}.csv"
