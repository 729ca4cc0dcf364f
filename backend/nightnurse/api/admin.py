"""Admin dashboard, listings and CSV exports behind HTTP Basic auth."""

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from backend.nightnurse.core.time import utc_now
from backend.nightnurse.db.store import RecordFilters, RecordStore
from backend.nightnurse.dependencies.auth import require_admin
from backend.nightnurse.dependencies.services import get_store
from backend.nightnurse.schemas.admin_reporting import (
    CaregiverListing,
    DashboardResponse,
    NewsletterListing,
    ParentListing,
)
from backend.nightnurse.services.dashboard_service import (
    get_caregiver_listing,
    get_dashboard,
    get_newsletter_listing,
    get_parent_listing,
)
from backend.nightnurse.services.export_service import export_csv, export_filename

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _csv_response(content: bytes, kind: str) -> Response:
    filename = export_filename(kind, utc_now().date())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def parent_filters(
    start_date: str | None = None,
    end_date: str | None = None,
    location: str | None = None,
    limit: int | None = Query(default=None, ge=1),
) -> RecordFilters:
    return RecordFilters(start_date=start_date, end_date=end_date, location=location, limit=limit)


def caregiver_filters(
    start_date: str | None = None,
    end_date: str | None = None,
    experience: str | None = None,
    certification: str | None = None,
    limit: int | None = Query(default=None, ge=1),
) -> RecordFilters:
    return RecordFilters(
        start_date=start_date,
        end_date=end_date,
        experience_years=experience,
        certification=certification,
        limit=limit,
    )


@router.get("", response_model=DashboardResponse)
def admin_dashboard(store: RecordStore = Depends(get_store)):
    """Stats plus the ten most recent parents and caregivers."""
    return get_dashboard(store)


@router.get("/parents", response_model=ParentListing)
def list_parents(filters: RecordFilters = Depends(parent_filters), store: RecordStore = Depends(get_store)):
    return get_parent_listing(store, filters)


@router.get("/caregivers", response_model=CaregiverListing)
def list_caregivers(filters: RecordFilters = Depends(caregiver_filters), store: RecordStore = Depends(get_store)):
    return get_caregiver_listing(store, filters)


@router.get("/newsletter", response_model=NewsletterListing)
def list_newsletter(store: RecordStore = Depends(get_store)):
    return get_newsletter_listing(store)


@router.get("/export/parents")
def export_parents(filters: RecordFilters = Depends(parent_filters), store: RecordStore = Depends(get_store)):
    return _csv_response(export_csv(store, "parents", filters), "parents")


@router.get("/export/caregivers")
def export_caregivers(filters: RecordFilters = Depends(caregiver_filters), store: RecordStore = Depends(get_store)):
    return _csv_response(export_csv(store, "caregivers", filters), "caregivers")


@router.get("/export.csv")
def legacy_export(
    request: Request,
    export_type: str | None = Query(default=None, alias="type"),
    store: RecordStore = Depends(get_store),
):
    """Older dashboard links: ?type=parents|caregivers|newsletter."""
    if export_type in ("parents", "caregivers"):
        remaining = [(key, value) for key, value in request.query_params.multi_items() if key != "type"]
        url = f"/admin/export/{export_type}"
        if remaining:
            url = f"{url}?{urlencode(remaining)}"
        return RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    if export_type == "newsletter":
        return _csv_response(export_csv(store, "newsletter"), "newsletter")
    return PlainTextResponse(
        "Invalid export type. Use ?type=parents, ?type=caregivers, or ?type=newsletter",
        status_code=status.HTTP_400_BAD_REQUEST,
    )
