"""Admin dashboard and listing response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from backend.nightnurse.schemas.records import (
    CaregiverApplicationRead,
    NewsletterSubscriberRead,
    ParentLeadRead,
)


class StatsSummary(BaseModel):
    """Submission counts, serialized in camelCase (totalParents, parentsThisWeek, ...)."""

    total_parents: int
    total_caregivers: int
    total_newsletter: int
    parents_this_week: int
    caregivers_this_week: int
    newsletter_this_week: int
    parents_this_month: int
    caregivers_this_month: int
    newsletter_this_month: int
    total_submissions: int
    supply_demand_ratio: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NewsletterStats(BaseModel):
    total: int
    this_week: int
    this_month: int


class AppliedFilters(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    experience: Optional[str] = None
    certification: Optional[str] = None


class DashboardResponse(BaseModel):
    stats: StatsSummary
    recent_parents: list[ParentLeadRead]
    recent_caregivers: list[CaregiverApplicationRead]


class ParentListing(BaseModel):
    parents: list[ParentLeadRead]
    total_parents: int
    parents_this_week: int
    parents_this_month: int
    filters: AppliedFilters
    locations: list[str]


class CaregiverListing(BaseModel):
    caregivers: list[CaregiverApplicationRead]
    total_caregivers: int
    caregivers_this_week: int
    caregivers_this_month: int
    filters: AppliedFilters
    experience_options: list[str]
    certification_options: list[str]


class NewsletterListing(BaseModel):
    stats: NewsletterStats
    subscribers: list[NewsletterSubscriberRead]
