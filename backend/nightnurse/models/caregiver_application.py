"""Caregiver application model for Tahoe Night Nurse."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text

from backend.nightnurse.core.choices import EXPERIENCE_BUCKETS, split_selections
from backend.nightnurse.db.base_class import Base, in_choices


class CaregiverApplication(Base):
    __tablename__ = "caregiver_applications"
    __table_args__ = (
        CheckConstraint(in_choices("experience_years", EXPERIENCE_BUCKETS), name="ck_caregiver_applications_experience"),
        CheckConstraint("certifications <> ''", name="ck_caregiver_applications_certifications"),
        CheckConstraint("willing_regions <> ''", name="ck_caregiver_applications_regions"),
        Index("ix_caregiver_applications_email_created_at", "email", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(20), nullable=False)
    base_location = Column(String(120), nullable=False)
    willing_regions = Column(Text, nullable=False)
    experience_years = Column(String(8), nullable=False)
    certifications = Column(Text, nullable=False)
    availability_notes = Column(String(280), nullable=True)
    experience_summary = Column(Text, nullable=True)
    user_agent = Column(String(512), nullable=True)
    ip_addr = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)
    is_duplicate = Column(Boolean, nullable=False, default=False)

    @property
    def willing_region_list(self) -> list[str]:
        return split_selections(self.willing_regions)

    @property
    def certification_list(self) -> list[str]:
        return split_selections(self.certifications)
