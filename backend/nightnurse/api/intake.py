"""Public form intake endpoints: parent leads, caregiver applications, newsletter."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from backend.nightnurse.core.errors import DuplicateConstraintError, StorageError, SubmissionValidationError
from backend.nightnurse.core.settings import Settings
from backend.nightnurse.db.store import RecordStore
from backend.nightnurse.dependencies.services import (
    client_address,
    get_app_settings,
    get_notifier,
    get_rate_limiter,
    get_store,
)
from backend.nightnurse.schemas.admin_reporting import StatsSummary
from backend.nightnurse.services.notifications import Notifier, dispatch_submission_notifications
from backend.nightnurse.services.rate_limit import SubmissionRateLimiter
from backend.nightnurse.services.validation import (
    validate_caregiver_application,
    validate_newsletter_signup,
    validate_parent_lead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["intake"])

MULTI_VALUE_FIELDS = {"willing_regions", "certifications"}


async def read_submission(request: Request) -> dict:
    """Read a form-encoded or JSON body into a plain dict of strings and string lists."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            raise SubmissionValidationError.single("body", "Invalid submission")
        if not isinstance(payload, dict):
            raise SubmissionValidationError.single("body", "Invalid submission")
        return payload

    form = await request.form()
    data: dict = {}
    for key in form.keys():
        # Checkbox groups often arrive as "certifications[]"
        name = key[:-2] if key.endswith("[]") else key
        values = [value for value in form.getlist(key) if isinstance(value, str)]
        if name in MULTI_VALUE_FIELDS:
            data.setdefault(name, []).extend(values)
        else:
            data[name] = values[0] if values else None
    return data


async def _accept_submission(
    request: Request,
    *,
    kind: str,
    validate,
    insert,
    background_tasks: BackgroundTasks,
    limiter: SubmissionRateLimiter,
    notifier: Notifier,
    settings: Settings,
) -> RedirectResponse:
    client = client_address(request)
    limiter.check(client, strict=True)

    try:
        submission = validate(await read_submission(request))
    except SubmissionValidationError as exc:
        limiter.record_failure(client)
        logger.info("Rejected %s submission from %s: %s", kind, client, exc.message)
        raise

    user_agent = request.headers.get("user-agent")
    try:
        result = await run_in_threadpool(insert, submission, user_agent=user_agent, ip_addr=client)
    except StorageError:
        limiter.record_failure(client)
        raise
    logger.info("Stored %s submission id=%s duplicate=%s", kind, result.id, result.is_duplicate)

    record = submission.model_dump(exclude={"honeypot"})
    record.update(id=result.id, user_agent=user_agent, ip_addr=client)
    background_tasks.add_task(dispatch_submission_notifications, notifier, kind, record, result.is_duplicate)
    return RedirectResponse(settings.thank_you_url, status_code=status.HTTP_302_FOUND)


@router.post("/parents")
async def submit_parent_lead(
    request: Request,
    background_tasks: BackgroundTasks,
    store: RecordStore = Depends(get_store),
    limiter: SubmissionRateLimiter = Depends(get_rate_limiter),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    return await _accept_submission(
        request,
        kind="parent",
        validate=validate_parent_lead,
        insert=store.insert_parent_lead,
        background_tasks=background_tasks,
        limiter=limiter,
        notifier=notifier,
        settings=settings,
    )


@router.post("/caregivers")
async def submit_caregiver_application(
    request: Request,
    background_tasks: BackgroundTasks,
    store: RecordStore = Depends(get_store),
    limiter: SubmissionRateLimiter = Depends(get_rate_limiter),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    return await _accept_submission(
        request,
        kind="caregiver",
        validate=validate_caregiver_application,
        insert=store.insert_caregiver_application,
        background_tasks=background_tasks,
        limiter=limiter,
        notifier=notifier,
        settings=settings,
    )


@router.post("/newsletter")
async def subscribe_newsletter(
    request: Request,
    store: RecordStore = Depends(get_store),
    limiter: SubmissionRateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_app_settings),
):
    limiter.check(client_address(request))
    email = validate_newsletter_signup(await read_submission(request))
    try:
        subscriber_id = await run_in_threadpool(store.add_newsletter_subscriber, email)
        logger.info("Newsletter signup stored id=%s", subscriber_id)
    except DuplicateConstraintError:
        # Already subscribed: same outcome as a fresh signup
        logger.info("Newsletter signup for an existing subscriber")
    return RedirectResponse(settings.thank_you_url, status_code=status.HTTP_302_FOUND)


@router.get("/stats", response_model=StatsSummary)
def get_public_stats(store: RecordStore = Depends(get_store)):
    return store.get_stats()
