"""Admin dashboard and listing data built from the record store."""

from collections import Counter

from backend.nightnurse.core.choices import CERTIFICATION_OPTIONS, EXPERIENCE_BUCKETS, LOCATIONS
from backend.nightnurse.db.store import RecordFilters, RecordStore
from backend.nightnurse.schemas.records import CaregiverApplicationRead, NewsletterSubscriberRead, ParentLeadRead

RECENT_LIMIT = 10


def annotate_duplicates(rows, read_schema) -> list:
    """Mark each row that shares its email with another row in the same result set."""
    email_counts = Counter(row.email for row in rows)
    annotated = []
    for row in rows:
        item = read_schema.model_validate(row)
        item.has_duplicates = email_counts[row.email] > 1
        annotated.append(item)
    return annotated


def get_dashboard(store: RecordStore) -> dict:
    parents = store.query_parent_leads(RecordFilters(limit=RECENT_LIMIT))
    caregivers = store.query_caregiver_applications(RecordFilters(limit=RECENT_LIMIT))
    return {
        "stats": store.get_stats(),
        "recent_parents": [ParentLeadRead.model_validate(row) for row in parents],
        "recent_caregivers": [CaregiverApplicationRead.model_validate(row) for row in caregivers],
    }


def get_parent_listing(store: RecordStore, filters: RecordFilters) -> dict:
    parents = store.query_parent_leads(filters)
    stats = store.get_stats()
    return {
        "parents": annotate_duplicates(parents, ParentLeadRead),
        "total_parents": stats["total_parents"],
        "parents_this_week": stats["parents_this_week"],
        "parents_this_month": stats["parents_this_month"],
        "filters": {
            "start_date": filters.start_date,
            "end_date": filters.end_date,
            "location": filters.location,
        },
        "locations": list(LOCATIONS),
    }


def get_caregiver_listing(store: RecordStore, filters: RecordFilters) -> dict:
    caregivers = store.query_caregiver_applications(filters)
    stats = store.get_stats()
    return {
        "caregivers": annotate_duplicates(caregivers, CaregiverApplicationRead),
        "total_caregivers": stats["total_caregivers"],
        "caregivers_this_week": stats["caregivers_this_week"],
        "caregivers_this_month": stats["caregivers_this_month"],
        "filters": {
            "start_date": filters.start_date,
            "end_date": filters.end_date,
            "experience": filters.experience_years,
            "certification": filters.certification,
        },
        "experience_options": list(EXPERIENCE_BUCKETS),
        "certification_options": list(CERTIFICATION_OPTIONS),
    }


def get_newsletter_listing(store: RecordStore) -> dict:
    return {
        "stats": store.get_newsletter_stats(),
        "subscribers": [NewsletterSubscriberRead.model_validate(row) for row in store.list_newsletter_subscribers()],
    }
