"""Fixed form choices and the delimited-text encoding for multi-select fields."""

from typing import Iterable

LOCATIONS = (
    "South Lake Tahoe",
    "North Lake Tahoe",
    "Truckee",
    "Visiting (not local)",
    "Other (in region)",
)

START_TIMEFRAMES = (
    "ASAP",
    "Next 2-4 weeks",
    "1-3 months",
    "3+ months",
    "Just researching",
)

EXPERIENCE_BUCKETS = ("<1", "1-2", "2-5", "5+")

# Offered on the caregiver form; stored values are not restricted to these
CERTIFICATION_OPTIONS = ("ncs", "doula", "rn_lpn", "cpr", "none")

SELECTION_DELIMITER = ","


def join_selections(values: Iterable[str]) -> str:
    return f"{SELECTION_DELIMITER} ".join(values)


def split_selections(text: str | None) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in text.split(SELECTION_DELIMITER) if part.strip()]
