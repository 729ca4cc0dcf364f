"""Request dependencies that hand out the app-scoped store, limiter and notifier."""

from fastapi import Request

from backend.nightnurse.core.settings import Settings
from backend.nightnurse.db.store import RecordStore
from backend.nightnurse.services.notifications import Notifier
from backend.nightnurse.services.rate_limit import SubmissionRateLimiter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_rate_limiter(request: Request) -> SubmissionRateLimiter:
    return request.app.state.rate_limiter


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"
