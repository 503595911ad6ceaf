"""Integration tests for the report HTTP API.

Run with: pytest tests/test_report_api.py -v
"""

import uuid

import pytest
from rest_framework.test import APIClient

from reports.models import ActivityLog, Attraction, DailyReport, ReportEditLog, Site, Staff

REPORT_BODY = {
    "report_date": "2024-06-01",
    "anak_count": 2,
    "dewasa_count": 10,
    "wna_count": 1,
    "dewasa_male": 6,
    "dewasa_female": 4,
    "wna_countries": {"jp": 1},
    "cash_amount": 110000,
    "qris_amount": 100000,
    "ticket_blocks": [
        {"category": "dewasa", "block_no": "A", "start_no": "0001", "end_no": "0010"},
        {"category": "anak", "block_no": "K", "start_no": "", "end_no": ""},
    ],
}


@pytest.fixture
def site(db) -> Site:
    return Site.objects.create(code="CRN", name="Curug Nangka", location="Bogor")


@pytest.fixture
def other_site(db) -> Site:
    return Site.objects.create(code="TLG", name="Telaga Warna")


@pytest.fixture
def petugas(site) -> Staff:
    return Staff.objects.create(name="Ujang", role="petugas", site=site)


@pytest.fixture
def koordinator(site) -> Staff:
    return Staff.objects.create(name="Euis", role="koordinator", site=site)


@pytest.fixture
def admin(db) -> Staff:
    return Staff.objects.create(name="Admin", role="admin")


def as_user(client: APIClient, staff: Staff) -> APIClient:
    client.credentials(HTTP_X_USER_ID=str(staff.id))
    return client


@pytest.fixture
def draft_id(api_client, petugas) -> str:
    response = as_user(api_client, petugas).post("/api/reports", REPORT_BODY, format="json")
    assert response.status_code == 200, response.data
    return response.data["data"]["id"]


@pytest.mark.django_db
class TestSaveDraft:
    """Tests for POST /api/reports"""

    def test_save_draft_returns_report_and_warnings(self, api_client, petugas, site):
        """Given a valid form, returns the stored draft with derived revenue."""
        response = as_user(api_client, petugas).post("/api/reports", REPORT_BODY, format="json")
        assert response.status_code == 200
        body = response.data
        assert body["success"] is True
        data = body["data"]
        assert data["status"] == "draft"
        assert data["site_id"] == str(site.id)
        assert data["wna_countries"] == {"JP": 1}
        assert data["dewasa_revenue"] == 150000
        assert data["total_revenue"] == 210000
        assert data["ticket_blocks"] == [
            {"category": "dewasa", "block_no": "A", "start_no": "0001", "end_no": "0010", "count": 10}
        ]
        assert any("anak" in warning for warning in body["warnings"])
        assert DailyReport.objects.count() == 1
        assert ActivityLog.objects.filter(action="create_draft").count() == 1

    def test_save_draft_without_caller(self, api_client, site):
        """Given no X-User-Id header, returns 400."""
        response = api_client.post("/api/reports", REPORT_BODY, format="json")
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_INPUT"

    def test_save_draft_unknown_caller(self, api_client, site):
        """Given an unknown caller, returns 404."""
        api_client.credentials(HTTP_X_USER_ID=str(uuid.uuid4()))
        response = api_client.post("/api/reports", REPORT_BODY, format="json")
        assert response.status_code == 404
        assert response.data["error"]["code"] == "USER_NOT_FOUND"

    def test_save_draft_rejects_negative_count(self, api_client, petugas):
        """Given a negative count, returns 400 with field errors."""
        body = {**REPORT_BODY, "dewasa_count": -1}
        response = as_user(api_client, petugas).post("/api/reports", body, format="json")
        assert response.status_code == 400
        assert "dewasa_count" in response.data["error"]["fields"]

    def test_save_draft_rejects_bad_country_code(self, api_client, petugas):
        """Given a malformed country code, returns 400."""
        body = {**REPORT_BODY, "wna_countries": {"JPN": 1}}
        response = as_user(api_client, petugas).post("/api/reports", body, format="json")
        assert response.status_code == 400

    def test_save_draft_uses_current_visitor_limit(self, api_client, petugas, settings):
        """Given a lowered daily maximum, counts above it are refused."""
        settings.REPORTS_MAX_VISITORS_PER_DAY = 5
        response = as_user(api_client, petugas).post("/api/reports", REPORT_BODY, format="json")
        assert response.status_code == 400
        assert set(response.data["error"]["fields"]) == {"dewasa_count", "dewasa_male"}

    def test_save_draft_uses_current_notes_limit(self, api_client, petugas, settings):
        """Given a lowered notes limit, longer notes are refused."""
        settings.REPORTS_MAX_NOTES_LENGTH = 4
        body = {**REPORT_BODY, "notes": "hujan deras"}
        response = as_user(api_client, petugas).post("/api/reports", body, format="json")
        assert response.status_code == 400
        assert "notes" in response.data["error"]["fields"]

    def test_save_draft_with_attraction(self, api_client, petugas, site):
        """Given an attraction entry, stores the sub-report."""
        attraction = Attraction.objects.create(site=site, name="Flying Fox", price=20000)
        body = {
            **REPORT_BODY,
            "cash_amount": 150000,
            "attractions": [{"attraction_id": str(attraction.id), "visitor_count": 2}],
        }
        response = as_user(api_client, petugas).post("/api/reports", body, format="json")
        assert response.status_code == 200
        (sub,) = response.data["data"]["attractions"]
        assert sub["visitor_count"] == 2
        assert sub["revenue"] == 40000


@pytest.mark.django_db
class TestReportLifecycle:
    """Tests for submit, edit and delete endpoints"""

    def test_submit_report(self, api_client, koordinator, draft_id):
        """Given a consistent draft, submitting returns the submitted report."""
        response = as_user(api_client, koordinator).post(f"/api/reports/{draft_id}/submit")
        assert response.status_code == 200
        assert response.data["data"]["status"] == "submitted"
        assert response.data["data"]["submitted_by"] == str(koordinator.id)

    def test_submit_twice_conflicts(self, api_client, koordinator, draft_id):
        """Given a submitted report, submitting again returns 409."""
        client = as_user(api_client, koordinator)
        client.post(f"/api/reports/{draft_id}/submit")
        response = client.post(f"/api/reports/{draft_id}/submit")
        assert response.status_code == 409
        assert response.data["error"]["code"] == "ALREADY_SUBMITTED"

    def test_submit_inconsistent_report(self, api_client, petugas, koordinator):
        """Given a gender mismatch, returns 422 naming the check."""
        body = {**REPORT_BODY, "dewasa_female": 3}
        report_id = as_user(api_client, petugas).post("/api/reports", body, format="json").data[
            "data"
        ]["id"]
        response = as_user(api_client, koordinator).post(f"/api/reports/{report_id}/submit")
        assert response.status_code == 422
        assert response.data["error"]["check"] == "gender"

    def test_petugas_cannot_submit(self, api_client, petugas, draft_id):
        """Given a petugas caller, returns 403."""
        response = as_user(api_client, petugas).post(f"/api/reports/{draft_id}/submit")
        assert response.status_code == 403

    def test_privileged_edit(self, api_client, koordinator, admin, draft_id):
        """Given an admin edit with a reason, returns the updated report and logs it."""
        as_user(api_client, koordinator).post(f"/api/reports/{draft_id}/submit")
        response = as_user(api_client, admin).patch(
            f"/api/reports/{draft_id}/edit",
            {"wna_count": 8, "reason": "recount"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["data"]["wna_revenue"] == 400000
        assert response.data["message"] == "Report updated (1 fields changed)"
        entry = ReportEditLog.objects.get(report_id=draft_id)
        assert entry.changes == {"wna_count": {"old": 1, "new": 8}}

        history = api_client.get(f"/api/reports/{draft_id}/edits")
        assert history.status_code == 200
        assert history.data["data"][0]["reason"] == "recount"

    def test_privileged_edit_without_reason(self, api_client, admin, draft_id):
        """Given no reason, returns 400 NO_REASON_GIVEN."""
        response = as_user(api_client, admin).patch(
            f"/api/reports/{draft_id}/edit", {"wna_count": 8}, format="json"
        )
        assert response.status_code == 400
        assert response.data["error"]["code"] == "NO_REASON_GIVEN"

    def test_privileged_edit_rejects_revenue(self, api_client, admin, draft_id):
        """Given a revenue field, returns 400."""
        response = as_user(api_client, admin).patch(
            f"/api/reports/{draft_id}/edit",
            {"wna_revenue": 0, "reason": "x"},
            format="json",
        )
        assert response.status_code == 400

    def test_delete_submitted_needs_admin(self, api_client, koordinator, admin, draft_id):
        """Given a submitted report, only an admin can delete it."""
        client = as_user(api_client, koordinator)
        client.post(f"/api/reports/{draft_id}/submit")
        assert client.delete(f"/api/reports/{draft_id}").status_code == 403

        response = as_user(api_client, admin).delete(
            f"/api/reports/{draft_id}?reason=duplicate"
        )
        assert response.status_code == 200
        assert not DailyReport.objects.filter(pk=draft_id).exists()
        record = ActivityLog.objects.get(action="delete_report")
        assert record.details["reason"] == "duplicate"

    def test_get_missing_report(self, api_client, admin):
        """Given an unknown id, returns 404."""
        response = as_user(api_client, admin).get(f"/api/reports/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.data["error"]["code"] == "REPORT_NOT_FOUND"

    def test_get_malformed_report_id(self, api_client, admin):
        """Given a malformed id, returns 400."""
        response = as_user(api_client, admin).get("/api/reports/not-a-uuid")
        assert response.status_code == 400


@pytest.mark.django_db
class TestManualReport:
    """Tests for POST /api/reports/manual"""

    def test_admin_creates_manual_report(self, api_client, admin, site):
        """Given an admin and a free date, returns 201 with a submitted report."""
        body = {**REPORT_BODY, "site_id": str(site.id), "notes": "dari buku"}
        response = as_user(api_client, admin).post("/api/reports/manual", body, format="json")
        assert response.status_code == 201
        assert response.data["data"]["status"] == "submitted"
        assert response.data["data"]["notes"] == "[Input Manual] dari buku"

    def test_manual_report_conflicts_with_existing(self, api_client, admin, site, draft_id):
        """Given an existing report for the date, returns 409."""
        body = {**REPORT_BODY, "site_id": str(site.id)}
        response = as_user(api_client, admin).post("/api/reports/manual", body, format="json")
        assert response.status_code == 409
        assert response.data["error"]["code"] == "REPORT_EXISTS"


@pytest.mark.django_db
class TestReportQueries:
    """Tests for list, daily status and ticket usage endpoints"""

    def test_list_reports_scoped_to_site(self, api_client, petugas, admin, other_site, draft_id):
        """Given reports at two sites, staff only see their own."""
        body = {**REPORT_BODY, "site_id": str(other_site.id), "report_date": "2024-05-31"}
        as_user(api_client, admin).post("/api/reports/manual", body, format="json")

        everything = as_user(api_client, admin).get("/api/reports")
        assert [r["report_date"] for r in everything.data["data"]] == ["2024-06-01", "2024-05-31"]

        own = as_user(api_client, petugas).get("/api/reports")
        assert [r["id"] for r in own.data["data"]] == [draft_id]

    def test_list_reports_filters_by_status(self, api_client, admin, draft_id):
        """Given a status filter, returns only matching reports."""
        response = as_user(api_client, admin).get("/api/reports?status=submitted")
        assert response.data["data"] == []

    def test_daily_status(self, api_client, petugas, site, draft_id):
        """Given a draft for the date, reports draft status."""
        response = as_user(api_client, petugas).get(f"/api/sites/{site.id}/status?date=2024-06-01")
        assert response.status_code == 200
        assert response.data["data"]["daily_status"] == "draft"
        assert response.data["data"]["report_id"] == draft_id

    def test_daily_status_pending(self, api_client, petugas, site):
        """Given no report for the date, reports pending."""
        response = as_user(api_client, petugas).get(f"/api/sites/{site.id}/status?date=2024-01-01")
        assert response.data["data"]["daily_status"] == "pending"

    def test_daily_status_bad_date(self, api_client, petugas, site):
        """Given an unparsable date, returns 400."""
        response = as_user(api_client, petugas).get(f"/api/sites/{site.id}/status?date=junk")
        assert response.status_code == 400

    def test_ticket_usage(self, api_client, admin, petugas, draft_id):
        """Given a report with stubs, lists each block with its count."""
        response = as_user(api_client, admin).get("/api/tickets/usage")
        assert response.status_code == 200
        (row,) = response.data["data"]
        assert (row["category"], row["count"], row["report_id"]) == ("dewasa", 10, draft_id)
        assert as_user(api_client, petugas).get("/api/tickets/usage").status_code == 403


@pytest.mark.django_db
class TestCatalog:
    """Tests for site and attraction endpoints"""

    def test_create_and_list_sites(self, api_client, admin):
        """Given an admin, creating a site returns 201 and it is listed."""
        client = as_user(api_client, admin)
        response = client.post("/api/sites", {"code": "pnc", "name": "Puncak"}, format="json")
        assert response.status_code == 201
        assert response.data["data"]["code"] == "PNC"
        listed = client.get("/api/sites")
        assert [s["code"] for s in listed.data["data"]] == ["PNC"]

    def test_duplicate_site_code(self, api_client, admin, site):
        """Given a taken code, returns 409."""
        response = as_user(api_client, admin).post(
            "/api/sites", {"code": "CRN", "name": "Again"}, format="json"
        )
        assert response.status_code == 409

    def test_update_site(self, api_client, admin, site):
        """Given new details, updates the site."""
        response = as_user(api_client, admin).patch(
            f"/api/sites/{site.id}", {"name": "Curug Nangka Baru"}, format="json"
        )
        assert response.status_code == 200
        site.refresh_from_db()
        assert site.name == "Curug Nangka Baru"
        assert site.code == "CRN"

    def test_attraction_crud(self, api_client, admin, site):
        """Given an admin, attractions can be created, listed, updated and removed."""
        client = as_user(api_client, admin)
        created = client.post(
            f"/api/sites/{site.id}/attractions",
            {"name": "Flying Fox", "unit_price": 20000},
            format="json",
        )
        assert created.status_code == 201
        attraction_id = created.data["data"]["id"]

        listed = client.get(f"/api/sites/{site.id}/attractions")
        assert [a["id"] for a in listed.data["data"]] == [attraction_id]

        updated = client.patch(
            f"/api/attractions/{attraction_id}", {"unit_price": 25000}, format="json"
        )
        assert updated.data["data"]["unit_price"] == 25000

        removed = client.delete(f"/api/attractions/{attraction_id}")
        assert removed.status_code == 200
        assert removed.data["message"] == "Attraction deleted"
        assert not Attraction.objects.filter(pk=attraction_id).exists()

    def test_attractions_of_unknown_site(self, api_client, petugas):
        """Given an unknown site, returns 404."""
        response = as_user(api_client, petugas).get(f"/api/sites/{uuid.uuid4()}/attractions")
        assert response.status_code == 404

    def test_listings_require_caller(self, api_client, site):
        """Given no caller header, site and attraction listings are refused."""
        assert api_client.get("/api/sites").status_code == 400
        assert api_client.get(f"/api/sites/{site.id}/attractions").status_code == 400

    def test_listings_reject_unknown_caller(self, api_client, site):
        """Given an unknown caller, site and attraction listings return 404."""
        api_client.credentials(HTTP_X_USER_ID=str(uuid.uuid4()))
        response = api_client.get("/api/sites")
        assert response.status_code == 404
        assert response.data["error"]["code"] == "USER_NOT_FOUND"
