"""Parent lead model for Tahoe Night Nurse."""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text

from backend.nightnurse.core.choices import LOCATIONS, START_TIMEFRAMES
from backend.nightnurse.db.base_class import Base, in_choices


class ParentLead(Base):
    __tablename__ = "parent_leads"
    __table_args__ = (
        CheckConstraint(in_choices("location", LOCATIONS), name="ck_parent_leads_location"),
        CheckConstraint(in_choices("start_timeframe", START_TIMEFRAMES), name="ck_parent_leads_start_timeframe"),
        Index("ix_parent_leads_email_created_at", "email", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(100), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(20), nullable=True)
    location = Column(String(40), nullable=False)
    due_or_age = Column(String(60), nullable=False)
    start_timeframe = Column(String(30), nullable=False)
    notes = Column(Text, nullable=True)
    user_agent = Column(String(512), nullable=True)
    ip_addr = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)
    is_duplicate = Column(Boolean, nullable=False, default=False)
