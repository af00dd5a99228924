"""Tests for the HTTP surface."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.auth import create_jwt_token
from app.database import get_db
from app.main import app
from app.models import Invoice, ShiftSwapRequest


@pytest.fixture
def template(make_job, company, alice):
    return make_job(company, title="Weekly office clean", assigned_to=alice.id)


@pytest.fixture
def swap(db, make_job, company, alice, bob):
    from_job = make_job(company, assigned_to=alice.id)
    to_job = make_job(company, assigned_to=bob.id)
    request = ShiftSwapRequest(
        company_id=company.id,
        from_employee_id=alice.id,
        to_employee_id=bob.id,
        from_job_id=from_job.id,
        to_job_id=to_job.id,
    )
    db.add(request)
    db.commit()
    return request


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestRecurringRoutes:
    def test_create_and_read_series(self, client, template):
        response = client.post(
            "/jobs/recurring", json={"templateId": template.id, "pattern": "weekly", "endDate": "2024-01-22"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["occurrenceCount"] == 3
        assert body["dateRange"] == {"start": "2024-01-01", "end": "2024-01-22"}

        listing = client.get("/jobs/recurring").json()
        assert listing[0]["childJobCount"] == 3

        detail = client.get(f"/jobs/recurring/{template.id}").json()
        assert detail["stats"]["total"] == 3

    def test_unknown_template_is_404(self, client):
        response = client.post("/jobs/recurring", json={"templateId": 999, "pattern": "weekly"})

        assert response.status_code == 404
        assert response.json() == {"detail": "Parent job not found"}

    def test_bad_pattern_is_400(self, client, template):
        response = client.post("/jobs/recurring", json={"templateId": template.id, "pattern": "hourly"})

        assert response.status_code == 400

    def test_bad_days_of_week_is_422(self, client, template):
        response = client.post(
            "/jobs/recurring", json={"templateId": template.id, "pattern": "weekly", "daysOfWeek": [9]}
        )

        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["body", "daysOfWeek"]

    def test_unparseable_start_date_is_422(self, client, template):
        response = client.post(
            "/jobs/recurring", json={"templateId": template.id, "pattern": "weekly", "startDate": "not-a-date"}
        )

        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["body", "startDate"]


class TestCalendarRoutes:
    def test_calendar(self, client, make_job, company):
        make_job(company, scheduled_for=datetime(2024, 3, 8, 9, 0))

        response = client.get("/jobs/calendar", params={"start": "2024-03-04", "end": "2024-03-10", "view": "week"})

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["totalJobs"] == 1
        assert body["meta"]["view"] == "week"
        assert list(body["byDay"]) == ["2024-03-08"]
        assert body["holidaysByDate"]["2024-03-08"] == [{"title": "Spring Test Day"}]

    def test_inverted_range_is_400(self, client):
        response = client.get("/jobs/calendar", params={"start": "2024-03-10", "end": "2024-03-04"})

        assert response.status_code == 400

    def test_bulk(self, client, make_job, company):
        job = make_job(company)

        response = client.post(
            "/jobs/calendar/bulk",
            json={"action": "updateStatus", "jobIds": [job.id, 999], "changes": {"status": "completed"}},
        )

        assert response.status_code == 200
        assert response.json() == {"success": [job.id], "failed": [999], "message": "1 jobs updated, 1 failed"}

    def test_bulk_unknown_action_is_400(self, client, make_job, company):
        job = make_job(company)

        response = client.post("/jobs/calendar/bulk", json={"action": "archive", "jobIds": [job.id]})

        assert response.status_code == 400


class TestShiftSwapRoutes:
    def test_approve_then_conflict(self, client, swap, notifier):
        response = client.patch(f"/shift-swaps/{swap.id}", json={"status": "approved"})

        assert response.status_code == 200
        assert response.json() == {"ok": True, "swapId": swap.id, "status": "approved"}
        assert len(notifier.assignments) == 2
        assert len(notifier.decisions) == 2

        again = client.patch(f"/shift-swaps/{swap.id}", json={"status": "rejected"})
        assert again.status_code == 409

    def test_unknown_swap_is_404(self, client):
        response = client.patch("/shift-swaps/999", json={"status": "approved"})

        assert response.status_code == 404

    def test_invalid_decision_is_400(self, client, swap):
        response = client.patch(f"/shift-swaps/{swap.id}", json={"status": "pending"})

        assert response.status_code == 400

    def test_notification_failure_still_succeeds(self, client, swap, notifier):
        notifier.fail = True

        response = client.patch(f"/shift-swaps/{swap.id}", json={"status": "approved"})

        assert response.status_code == 200

    def test_list(self, client, swap):
        response = client.get("/shift-swaps")

        assert response.status_code == 200
        assert [item["id"] for item in response.json()] == [swap.id]


class TestReminderRoutes:
    def test_preview_and_process(self, client, db, company, customer, notifier):
        db.add(
            Invoice(
                company_id=company.id,
                customer_id=customer.id,
                invoice_number="INV-001",
                total=Decimal("99.00"),
                status="sent",
                due_at=datetime.utcnow() + timedelta(days=7),
            )
        )
        db.commit()

        preview = client.get("/reminders/process").json()
        assert preview["count"] == 1
        assert preview["invoices"][0]["invoiceNumber"] == "INV-001"

        run = client.post("/reminders/process").json()
        assert (run["processed"], run["sent"], run["failed"]) == (1, 1, 0)
        assert len(notifier.reminders) == 1


class TestAuthentication:
    @pytest.fixture
    def unauthenticated_client(self, db):
        def override_get_db():
            yield db

        app.dependency_overrides[get_db] = override_get_db
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_valid_token(self, unauthenticated_client, company):
        token = create_jwt_token({"sub": "7", "company_id": company.id})

        response = unauthenticated_client.get("/shift-swaps", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == []

    def test_invalid_token(self, unauthenticated_client):
        response = unauthenticated_client.get("/shift-swaps", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401

    def test_token_without_company(self, unauthenticated_client):
        token = create_jwt_token({"sub": "7"})

        response = unauthenticated_client.get("/shift-swaps", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_missing_header(self, unauthenticated_client):
        response = unauthenticated_client.get("/shift-swaps")

        assert response.status_code in (401, 403)
