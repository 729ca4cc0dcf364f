"""Newsletter subscriber model for Tahoe Night Nurse."""

from sqlalchemy import Column, DateTime, Integer, String

from backend.nightnurse.db.base_class import Base


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    # Stored lowercased, so the unique index is case-insensitive in practice
    email = Column(String(254), nullable=False, unique=True, index=True)
    created_at = Column(DateTime, nullable=False, index=True)
