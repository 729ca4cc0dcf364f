import csv
import io
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from backend.nightnurse.core.settings import Settings
from backend.nightnurse.db.store import RecordStore
from backend.nightnurse.main import create_app
from backend.nightnurse.services.validation import validate_caregiver_application, validate_parent_lead

ADMIN = ("admin", "secret")


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime.now(UTC) - timedelta(days=2))


@pytest.fixture
def store(tmp_path, clock):
    return RecordStore(f"sqlite:///{tmp_path / 'admin.db'}", clock=clock)


@pytest.fixture
def client(tmp_path, store):
    settings = Settings(
        database_url=store.database_url,
        environment="test",
        basic_auth_user="admin",
        basic_auth_pass="secret",
    )
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


def add_parent(store, email, **overrides):
    payload = {
        "full_name": "Jane Doe",
        "email": email,
        "location": "Truckee",
        "due_or_age": "Due in May",
        "start_timeframe": "ASAP",
    }
    payload.update(overrides)
    return store.insert_parent_lead(validate_parent_lead(payload))


def add_caregiver(store, email, **overrides):
    payload = {
        "full_name": "Maria Lopez",
        "email": email,
        "phone": "530-555-0100",
        "base_location": "Truckee",
        "willing_regions": ["Truckee"],
        "experience_years": "2-5",
        "certifications": ["rn_lpn", "cpr"],
    }
    payload.update(overrides)
    return store.insert_caregiver_application(validate_caregiver_application(payload))


def read_csv(response) -> list[list[str]]:
    return list(csv.reader(io.StringIO(response.content.decode("utf-8"))))


def test_admin_requires_credentials(client):
    response = client.get("/admin")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == 'Basic realm="Admin Area"'
    assert response.text == "Access denied"


@pytest.mark.parametrize("path", ["/admin/parents", "/admin/caregivers", "/admin/newsletter", "/admin/export/parents"])
def test_admin_rejects_wrong_password(client, path):
    response = client.get(path, auth=("admin", "wrong"))
    assert response.status_code == 401


def test_admin_locked_when_credentials_unconfigured(tmp_path):
    settings = Settings(database_url=f"sqlite:///{tmp_path / 'locked.db'}", basic_auth_user="", basic_auth_pass="")
    with TestClient(create_app(settings)) as client:
        assert client.get("/admin", auth=("", "")).status_code == 401


def test_public_stats_do_not_require_auth(client):
    assert client.get("/api/stats").status_code == 200


def test_dashboard_returns_stats_and_recent_rows(client, store, clock):
    for i in range(12):
        add_parent(store, f"p{i}@example.com")
        clock.advance(minutes=1)
    add_caregiver(store, "c@example.com")

    response = client.get("/admin", auth=ADMIN)
    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["totalParents"] == 12
    assert body["stats"]["totalCaregivers"] == 1
    assert body["stats"]["totalSubmissions"] == 13
    assert body["stats"]["supplyDemandRatio"] == 8
    assert len(body["recent_parents"]) == 10
    assert body["recent_parents"][0]["email"] == "p11@example.com"
    assert body["recent_caregivers"][0]["certifications"] == ["rn_lpn", "cpr"]


def test_parent_listing_filters_and_marks_duplicates(client, store, clock):
    add_parent(store, "twice@example.com")
    clock.advance(minutes=1)
    add_parent(store, "other@example.com", location="South Lake Tahoe")
    clock.advance(minutes=1)
    add_parent(store, "twice@example.com")

    response = client.get("/admin/parents", auth=ADMIN)
    body = response.json()
    assert [p["email"] for p in body["parents"]] == ["twice@example.com", "other@example.com", "twice@example.com"]
    assert [p["has_duplicates"] for p in body["parents"]] == [True, False, True]
    assert [p["is_duplicate"] for p in body["parents"]] == [True, False, False]
    assert body["total_parents"] == 3
    assert "Truckee" in body["locations"]

    response = client.get("/admin/parents", params={"location": "South Lake Tahoe"}, auth=ADMIN)
    body = response.json()
    assert [p["email"] for p in body["parents"]] == ["other@example.com"]
    assert body["filters"]["location"] == "South Lake Tahoe"
    assert body["total_parents"] == 3


def test_parent_listing_rejects_bad_dates(client):
    response = client.get("/admin/parents", params={"start_date": "yesterday"}, auth=ADMIN)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "start_date"


def test_caregiver_listing_filters(client, store, clock):
    add_caregiver(store, "rn@example.com")
    clock.advance(minutes=1)
    add_caregiver(store, "doula@example.com", experience_years="5+", certifications=["doula"])

    response = client.get("/admin/caregivers", params={"experience": "5+"}, auth=ADMIN)
    body = response.json()
    assert [c["email"] for c in body["caregivers"]] == ["doula@example.com"]
    assert body["filters"]["experience"] == "5+"
    assert body["experience_options"] == ["<1", "1-2", "2-5", "5+"]

    response = client.get("/admin/caregivers", params={"certification": "rn_lpn"}, auth=ADMIN)
    assert [c["email"] for c in response.json()["caregivers"]] == ["rn@example.com"]


def test_newsletter_listing(client, store, clock):
    store.add_newsletter_subscriber("first@example.com")
    clock.advance(minutes=1)
    store.add_newsletter_subscriber("second@example.com")

    body = client.get("/admin/newsletter", auth=ADMIN).json()
    assert body["stats"] == {"total": 2, "this_week": 2, "this_month": 2}
    assert [s["email"] for s in body["subscribers"]] == ["second@example.com", "first@example.com"]


def test_export_parents_csv(client, store, clock):
    add_parent(store, "a@example.com", notes='He said, "soon"\nand left')
    clock.advance(minutes=1)
    add_parent(store, "b@example.com", location="South Lake Tahoe")

    response = client.get("/admin/export/parents", auth=ADMIN)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    today = datetime.now(UTC).date().isoformat()
    assert response.headers["content-disposition"] == (
        f'attachment; filename="tahoe_night_nurse_parents_{today}.csv"'
    )

    rows = read_csv(response)
    assert rows[0] == [
        "ID", "Date", "Name", "Email", "Phone", "Location", "Due/Age", "Start Timeframe", "Notes", "Duplicate",
    ]
    assert [row[3] for row in rows[1:]] == ["b@example.com", "a@example.com"]
    assert rows[2][8] == 'He said, "soon"\nand left'
    assert rows[2][9] == "No"


def test_export_parents_honors_filters(client, store):
    add_parent(store, "a@example.com")
    add_parent(store, "b@example.com", location="South Lake Tahoe")

    response = client.get("/admin/export/parents", params={"location": "Truckee"}, auth=ADMIN)
    rows = read_csv(response)
    assert [row[3] for row in rows[1:]] == ["a@example.com"]


def test_export_caregivers_csv(client, store):
    add_caregiver(store, "c@example.com")

    rows = read_csv(client.get("/admin/export/caregivers", auth=ADMIN))
    assert rows[0][:7] == ["ID", "Date", "Name", "Email", "Phone", "Base Location", "Willing Regions"]
    assert rows[1][8] == "rn_lpn, cpr"


def test_legacy_export_redirects_with_filters(client):
    response = client.get(
        "/admin/export.csv",
        params={"type": "parents", "location": "Truckee"},
        auth=ADMIN,
        follow_redirects=False,
    )
    assert response.status_code == 302
    assert response.headers["location"] == "/admin/export/parents?location=Truckee"

    response = client.get("/admin/export.csv", params={"type": "caregivers"}, auth=ADMIN, follow_redirects=False)
    assert response.headers["location"] == "/admin/export/caregivers"


def test_legacy_export_newsletter(client, store):
    store.add_newsletter_subscriber("reader@example.com")
    response = client.get("/admin/export.csv", params={"type": "newsletter"}, auth=ADMIN)
    assert response.status_code == 200
    rows = read_csv(response)
    assert rows[0] == ["ID", "Email", "Created At"]
    assert rows[1][1] == "reader@example.com"
    assert "tahoe_night_nurse_newsletter_" in response.headers["content-disposition"]


def test_legacy_export_rejects_unknown_type(client):
    response = client.get("/admin/export.csv", params={"type": "invoices"}, auth=ADMIN)
    assert response.status_code == 400
    assert response.text.startswith("Invalid export type")
