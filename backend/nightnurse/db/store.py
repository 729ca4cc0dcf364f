"""Relational record store for parent leads, caregiver applications and newsletter signups.

The store owns its engine and session factory. It is built once per app,
opened at startup and closed at shutdown; request handlers get it through a
dependency instead of importing a module-level session.

Duplicate flagging is advisory. The recent-email count and the insert run
under one lock per store, which serializes writes inside this process. Two
processes writing the same email at the same instant can both miss each
other; that is acceptable because nothing is rejected on the flag.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import create_engine, func
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.nightnurse.core.choices import join_selections
from backend.nightnurse.core.errors import DuplicateConstraintError, StorageError, SubmissionValidationError
from backend.nightnurse.core.time import to_naive_utc, utc_now
from backend.nightnurse.db.base import Base
from backend.nightnurse.models.caregiver_application import CaregiverApplication
from backend.nightnurse.models.newsletter_subscriber import NewsletterSubscriber
from backend.nightnurse.models.parent_lead import ParentLead
from backend.nightnurse.schemas.submissions import CaregiverApplicationSubmission, ParentLeadSubmission

logger = logging.getLogger(__name__)

DUPLICATE_WINDOW = timedelta(days=30)
WEEK = timedelta(days=7)
MONTH = timedelta(days=30)


@dataclass(frozen=True)
class InsertResult:
    id: int
    is_duplicate: bool


@dataclass
class RecordFilters:
    """Optional, ANDed filters for admin listings and exports."""

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[str] = None
    certification: Optional[str] = None
    limit: Optional[int] = None

    def created_at_bounds(self) -> tuple[Optional[datetime], Optional[datetime]]:
        start = _parse_bound(self.start_date, "start_date", end_of_day=False)
        end = _parse_bound(self.end_date, "end_date", end_of_day=True)
        return start, end


def _parse_bound(value: Optional[str], field: str, *, end_of_day: bool) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    text = value.strip()
    try:
        day = date.fromisoformat(text)
    except ValueError:
        day = None
    if day is not None:
        start = datetime(day.year, day.month, day.day)
        # A bare end date covers that whole day
        return start + timedelta(days=1) - timedelta(microseconds=1) if end_of_day else start
    try:
        return to_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        raise SubmissionValidationError.single(field, f"Invalid {field.replace('_', ' ')}: use YYYY-MM-DD")


def _truncate(value: Optional[str], length: int) -> Optional[str]:
    if not value:
        return None
    return value[:length]


class RecordStore:
    def __init__(self, database_url: str, *, clock: Callable[[], datetime] = utc_now):
        self.database_url = database_url
        self.clock = clock
        url = make_url(database_url)
        engine_kwargs = {}
        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        self.engine = create_engine(database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self._write_lock = threading.Lock()

    def open(self) -> None:
        url = make_url(self.database_url)
        if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        Base.metadata.create_all(bind=self.engine)
        logger.info("Record store opened at %s", url.render_as_string(hide_password=True))

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Record store closed")

    def now(self) -> datetime:
        return to_naive_utc(self.clock())

    @contextmanager
    def session(self):
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    # -- writes ---------------------------------------------------------------

    def _has_recent_submission(self, db: Session, model, email: str, now: datetime) -> bool:
        cutoff = now - DUPLICATE_WINDOW
        count = db.query(func.count(model.id)).filter(model.email == email, model.created_at >= cutoff).scalar()
        return count > 0

    def _insert(self, model, email: str, build: Callable[[datetime, bool], object]) -> InsertResult:
        email = email.strip().lower()
        with self._write_lock, self.session() as db:
            try:
                now = self.now()
                is_duplicate = self._has_recent_submission(db, model, email, now)
                row = build(now, is_duplicate)
                row.email = email
                db.add(row)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                raise StorageError(f"Failed to insert into {model.__tablename__}") from exc
            return InsertResult(id=row.id, is_duplicate=is_duplicate)

    def insert_parent_lead(
        self,
        record: ParentLeadSubmission,
        *,
        user_agent: Optional[str] = None,
        ip_addr: Optional[str] = None,
    ) -> InsertResult:
        def build(now: datetime, is_duplicate: bool) -> ParentLead:
            return ParentLead(
                full_name=record.full_name,
                phone=record.phone,
                location=record.location,
                due_or_age=record.due_or_age,
                start_timeframe=record.start_timeframe,
                notes=record.notes,
                user_agent=_truncate(user_agent, 512),
                ip_addr=_truncate(ip_addr, 64),
                created_at=now,
                is_duplicate=is_duplicate,
            )

        return self._insert(ParentLead, record.email, build)

    def insert_caregiver_application(
        self,
        record: CaregiverApplicationSubmission,
        *,
        user_agent: Optional[str] = None,
        ip_addr: Optional[str] = None,
    ) -> InsertResult:
        def build(now: datetime, is_duplicate: bool) -> CaregiverApplication:
            return CaregiverApplication(
                full_name=record.full_name,
                phone=record.phone,
                base_location=record.base_location,
                willing_regions=join_selections(record.willing_regions),
                experience_years=record.experience_years,
                certifications=join_selections(record.certifications),
                availability_notes=record.availability_notes,
                experience_summary=record.experience_summary,
                user_agent=_truncate(user_agent, 512),
                ip_addr=_truncate(ip_addr, 64),
                created_at=now,
                is_duplicate=is_duplicate,
            )

        return self._insert(CaregiverApplication, record.email, build)

    def add_newsletter_subscriber(self, email: str) -> int:
        email = email.strip().lower()
        with self._write_lock, self.session() as db:
            subscriber = NewsletterSubscriber(email=email, created_at=self.now())
            db.add(subscriber)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise DuplicateConstraintError(f"{email} is already subscribed") from exc
            except SQLAlchemyError as exc:
                db.rollback()
                raise StorageError("Failed to insert newsletter subscriber") from exc
            return subscriber.id

    # -- reads ----------------------------------------------------------------

    def _run_query(self, db: Session, model, filters: RecordFilters, apply_fields: Callable) -> list:
        start, end = filters.created_at_bounds()
        query = db.query(model)
        if start is not None:
            query = query.filter(model.created_at >= start)
        if end is not None:
            query = query.filter(model.created_at <= end)
        query = apply_fields(query)
        query = query.order_by(model.created_at.desc(), model.id.desc())
        if filters.limit:
            query = query.limit(filters.limit)
        try:
            return query.all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to query {model.__tablename__}") from exc

    def query_parent_leads(self, filters: Optional[RecordFilters] = None) -> list[ParentLead]:
        filters = filters or RecordFilters()

        def apply_fields(query):
            if filters.location:
                query = query.filter(ParentLead.location == filters.location)
            return query

        with self.session() as db:
            return self._run_query(db, ParentLead, filters, apply_fields)

    def query_caregiver_applications(self, filters: Optional[RecordFilters] = None) -> list[CaregiverApplication]:
        filters = filters or RecordFilters()

        def apply_fields(query):
            if filters.experience_years:
                query = query.filter(CaregiverApplication.experience_years == filters.experience_years)
            if filters.certification:
                query = query.filter(CaregiverApplication.certifications.contains(filters.certification, autoescape=True))
            return query

        with self.session() as db:
            return self._run_query(db, CaregiverApplication, filters, apply_fields)

    def list_newsletter_subscribers(self, limit: Optional[int] = None) -> list[NewsletterSubscriber]:
        with self.session() as db:
            return self._run_query(db, NewsletterSubscriber, RecordFilters(limit=limit), lambda query: query)

    # -- stats ----------------------------------------------------------------

    def _count(self, db: Session, model, since: Optional[datetime] = None) -> int:
        query = db.query(func.count(model.id))
        if since is not None:
            query = query.filter(model.created_at >= since)
        return query.scalar() or 0

    def get_stats(self) -> dict:
        """Totals plus trailing 7- and 30-day counts, recomputed on every call."""
        now = self.now()
        try:
            with self.session() as db:
                counts = {}
                for key, model in (
                    ("parents", ParentLead),
                    ("caregivers", CaregiverApplication),
                    ("newsletter", NewsletterSubscriber),
                ):
                    counts[f"total_{key}"] = self._count(db, model)
                    counts[f"{key}_this_week"] = self._count(db, model, since=now - WEEK)
                    counts[f"{key}_this_month"] = self._count(db, model, since=now - MONTH)
        except SQLAlchemyError as exc:
            raise StorageError("Failed to compute stats") from exc

        total_parents = counts["total_parents"]
        counts["total_submissions"] = total_parents + counts["total_caregivers"]
        counts["supply_demand_ratio"] = round(counts["total_caregivers"] / total_parents * 100) if total_parents else 0
        return counts

    def get_newsletter_stats(self) -> dict:
        stats = self.get_stats()
        return {
            "total": stats["total_newsletter"],
            "this_week": stats["newsletter_this_week"],
            "this_month": stats["newsletter_this_month"],
        }
