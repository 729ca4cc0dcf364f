"""Read schemas for stored submissions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from backend.nightnurse.core.choices import split_selections


class ParentLeadRead(BaseModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    location: str
    due_or_age: str
    start_timeframe: str
    notes: Optional[str] = None
    user_agent: Optional[str] = None
    ip_addr: Optional[str] = None
    created_at: datetime
    is_duplicate: bool
    has_duplicates: bool = False

    model_config = ConfigDict(from_attributes=True)


class CaregiverApplicationRead(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str
    base_location: str
    willing_regions: list[str]
    experience_years: str
    certifications: list[str]
    availability_notes: Optional[str] = None
    experience_summary: Optional[str] = None
    user_agent: Optional[str] = None
    ip_addr: Optional[str] = None
    created_at: datetime
    is_duplicate: bool
    has_duplicates: bool = False

    model_config = ConfigDict(from_attributes=True)

    @field_validator("willing_regions", "certifications", mode="before")
    @classmethod
    def split_stored_selections(cls, value):
        if isinstance(value, str):
            return split_selections(value)
        return value


class NewsletterSubscriberRead(BaseModel):
    id: int
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
