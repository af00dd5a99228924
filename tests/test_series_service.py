"""Tests for recurring series creation and listing."""

import json
from datetime import date, datetime, timedelta

import pytest

from app.domain.scheduling.repository import ChecklistRepository
from app.domain.scheduling.schemas import CreateSeriesRequest
from app.domain.scheduling.series_service import SeriesService
from app.models import CleaningPlan, EventLog, Job, JobTask, PlanTask
from app.shared.errors import NotFoundError, ValidationError


@pytest.fixture
def template(make_job, company, alice, customer):
    return make_job(
        company,
        title="Weekly office clean",
        customer_id=customer.id,
        assigned_to=alice.id,
        scheduled_for=datetime(2024, 1, 1, 9, 0),
        scheduled_end=datetime(2024, 1, 1, 11, 0),
        duration_minutes=120,
        location="1 High Street",
    )


@pytest.fixture
def plan(db, company):
    plan = CleaningPlan(company_id=company.id, name="Office standard")
    db.add(plan)
    db.flush()
    db.add_all(
        [
            PlanTask(plan_id=plan.id, title="Empty bins", order=2),
            PlanTask(plan_id=plan.id, title="Vacuum floors", order=1),
        ]
    )
    db.commit()
    return plan


def weekly_request(template_id: int, **overrides) -> CreateSeriesRequest:
    values = {"templateId": template_id, "pattern": "weekly", "endDate": "2024-01-22"}
    values.update(overrides)
    return CreateSeriesRequest(**values)


class TestCreateSeries:
    def test_creates_occurrences_from_template(self, db, template, auth_session, alice):
        result = SeriesService(db).create_series(weekly_request(template.id), auth_session)

        assert result.occurrenceCount == 3
        assert result.dateRange.start == date(2024, 1, 1)
        assert result.dateRange.end == date(2024, 1, 22)
        assert [o.scheduledFor for o in result.occurrences] == [
            datetime(2024, 1, 8, 9, 0),
            datetime(2024, 1, 15, 9, 0),
            datetime(2024, 1, 22, 9, 0),
        ]

        occurrences = db.query(Job).filter(Job.parent_job_id == template.id).all()
        assert len(occurrences) == 3
        for occurrence in occurrences:
            assert occurrence.recurrence == "none"
            assert occurrence.status == "scheduled"
            assert occurrence.title == "Weekly office clean"
            assert occurrence.assigned_to == alice.id
            assert occurrence.location == "1 High Street"
            assert occurrence.scheduled_end - occurrence.scheduled_for == timedelta(hours=2)

    def test_marks_template_as_recurring(self, db, template, auth_session):
        SeriesService(db).create_series(weekly_request(template.id), auth_session)

        db.refresh(template)
        assert template.recurrence == "weekly"
        assert template.recurrence_end_date == datetime(2024, 1, 22)
        assert template.parent_job_id is None

    def test_writes_audit_event(self, db, template, auth_session):
        SeriesService(db).create_series(weekly_request(template.id), auth_session)

        event = db.query(EventLog).filter(EventLog.event_type == "recurring_jobs_created").one()
        metadata = json.loads(event.event_metadata)
        assert event.entity_id == str(template.id)
        assert metadata["jobsCreated"] == 3
        assert metadata["recurrence"] == "weekly"
        assert metadata["createdBy"] == auth_session.user_id

    def test_template_without_end_has_no_occurrence_end(self, db, make_job, company, auth_session):
        template = make_job(company, scheduled_for=datetime(2024, 1, 1, 9, 0))

        result = SeriesService(db).create_series(
            CreateSeriesRequest(templateId=template.id, pattern="daily", endDate="2024-01-03"), auth_session
        )

        assert [o.scheduledEnd for o in result.occurrences] == [None, None]

    def test_cap_applies(self, db, template, auth_session):
        result = SeriesService(db).create_series(
            CreateSeriesRequest(templateId=template.id, pattern="daily", endDate="2024-12-31", maxOccurrences=10),
            auth_session,
        )

        assert result.occurrenceCount == 10

    def test_unknown_template(self, db, auth_session):
        with pytest.raises(NotFoundError):
            SeriesService(db).create_series(weekly_request(999), auth_session)

    def test_template_of_other_tenant(self, db, make_job, other_company, auth_session):
        foreign = make_job(other_company)

        with pytest.raises(NotFoundError):
            SeriesService(db).create_series(weekly_request(foreign.id), auth_session)

    def test_occurrence_cannot_be_a_template(self, db, template, make_job, company, auth_session):
        occurrence = make_job(company, parent_job_id=template.id)

        with pytest.raises(ValidationError):
            SeriesService(db).create_series(weekly_request(occurrence.id), auth_session)

    def test_missing_pattern(self, db, template, auth_session):
        with pytest.raises(ValidationError):
            SeriesService(db).create_series(weekly_request(template.id, pattern="none"), auth_session)

    def test_invalid_days_of_week_rejected_by_schema(self, template):
        with pytest.raises(ValueError):
            weekly_request(template.id, daysOfWeek=[1, 7])


class TestChecklistCloning:
    def test_plan_tasks_copied_in_order(self, db, make_job, company, plan, auth_session):
        template = make_job(company, plan_id=plan.id)

        SeriesService(db).create_series(
            CreateSeriesRequest(templateId=template.id, pattern="daily", endDate="2024-01-03"), auth_session
        )

        for occurrence in db.query(Job).filter(Job.parent_job_id == template.id).all():
            assert [task.title for task in occurrence.tasks] == ["Vacuum floors", "Empty bins"]
            assert all(task.status == "pending" for task in occurrence.tasks)

    def test_clone_failure_keeps_occurrences(self, db, make_job, company, plan, auth_session, monkeypatch):
        template = make_job(company, plan_id=plan.id)

        def broken(db, plan_id):
            raise RuntimeError("plan store unavailable")

        monkeypatch.setattr(ChecklistRepository, "get_plan_tasks", staticmethod(broken))

        result = SeriesService(db).create_series(
            CreateSeriesRequest(templateId=template.id, pattern="daily", endDate="2024-01-04"), auth_session
        )

        assert result.occurrenceCount == 3
        assert db.query(Job).filter(Job.parent_job_id == template.id).count() == 3
        assert db.query(JobTask).count() == 0


class TestSeriesQueries:
    def test_list_series_counts(self, db, template, auth_session):
        service = SeriesService(db)
        service.create_series(weekly_request(template.id), auth_session)

        first = db.query(Job).filter(Job.parent_job_id == template.id).order_by(Job.scheduled_for).first()
        first.status = "completed"
        db.commit()

        summaries = service.list_series(auth_session)

        assert len(summaries) == 1
        assert summaries[0].id == template.id
        assert summaries[0].childJobCount == 3
        assert summaries[0].completedCount == 1
        assert summaries[0].upcomingCount == 2

    def test_one_off_jobs_are_not_series(self, db, make_job, company, auth_session):
        make_job(company)

        assert SeriesService(db).list_series(auth_session) == []

    def test_get_series(self, db, template, auth_session):
        service = SeriesService(db)
        service.create_series(weekly_request(template.id), auth_session)

        detail = service.get_series(template.id, auth_session)

        assert detail.parent.id == template.id
        assert [child.scheduledFor.day for child in detail.children] == [8, 15, 22]
        assert detail.stats.total == 3
        assert detail.stats.scheduled == 3
        assert detail.stats.cancelled == 0
