"""Pytest fixtures for scheduling tests."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import datetime
from typing import Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import AuthSession, get_current_session
from app.cache import Cache
from app.database import Base, get_db
from app.domain.invoicing.router import get_reminder_notifier
from app.domain.scheduling.holidays import HolidayCache, HolidayFeedClient
from app.domain.scheduling.router import get_holiday_cache, get_notification_session_factory, get_notifier
from app.main import app
from app.models import Company, Customer, Employee, Job

HOLIDAY_FEED = {
    "england-and-wales": {
        "division": "england-and-wales",
        "events": [
            {"title": "New Year's Day", "date": "2024-01-01", "notes": "", "bunting": True},
            {"title": "Spring Test Day", "date": "2024-03-08", "notes": "", "bunting": False},
            {"title": "Christmas Day", "date": "2024-12-25", "notes": "", "bunting": True},
        ],
    },
    "scotland": {"division": "scotland", "events": []},
}


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FeedStub:
    """Serves the holiday feed through httpx.MockTransport and counts requests."""

    def __init__(self, payload: Optional[dict] = None, status_code: int = 200):
        self.payload = payload if payload is not None else HOLIDAY_FEED
        self.status_code = status_code
        self.calls = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingNotifier:
    """Notifier that records calls instead of sending email."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.assignments = []
        self.decisions = []
        self.reminders = []

    async def notify_assignment(self, employee, job, company):
        if self.fail:
            raise RuntimeError("mail server down")
        self.assignments.append((employee.id, job.id))

    async def notify_swap_decision(self, employee, status, job, other_employee, company=None):
        if self.fail:
            raise RuntimeError("mail server down")
        self.decisions.append((employee.id, status, job.id if job else None, other_employee.id))

    async def send_payment_reminder(self, invoice, customer, company):
        if self.fail:
            raise RuntimeError("mail server down")
        self.reminders.append((invoice.id, customer.email))


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Let SQLAlchemy drive BEGIN so SAVEPOINT behaves under pysqlite
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Create a database session for each test."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def company(db) -> Company:
    company = Company(name="Sparkle Cleaning", email="office@sparkle.test")
    db.add(company)
    db.commit()
    return company


@pytest.fixture
def other_company(db) -> Company:
    company = Company(name="Rival Cleaners", email="office@rival.test")
    db.add(company)
    db.commit()
    return company


@pytest.fixture
def alice(db, company) -> Employee:
    employee = Employee(
        company_id=company.id, first_name="Alice", last_name="Jones", email="alice@sparkle.test", role="cleaner"
    )
    db.add(employee)
    db.commit()
    return employee


@pytest.fixture
def bob(db, company) -> Employee:
    employee = Employee(
        company_id=company.id,
        first_name="Bob",
        last_name="Smith",
        email="bob@sparkle.test",
        role="supervisor",
        color="#000000",
    )
    db.add(employee)
    db.commit()
    return employee


@pytest.fixture
def customer(db, company) -> Customer:
    customer = Customer(
        company_id=company.id, first_name="Carol", last_name="White", email="carol@example.test", city="London"
    )
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def auth_session(company) -> AuthSession:
    return AuthSession(user_id=7, company_id=company.id, email="manager@sparkle.test")


@pytest.fixture
def make_job(db):
    """Factory for committed jobs."""

    def _make_job(company: Company, **values) -> Job:
        values.setdefault("title", "Office clean")
        values.setdefault("scheduled_for", datetime(2024, 1, 1, 9, 0))
        job = Job(company_id=company.id, **values)
        db.add(job)
        db.commit()
        return job

    return _make_job


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def feed() -> FeedStub:
    return FeedStub()


@pytest.fixture
def holiday_cache(feed, clock) -> HolidayCache:
    return HolidayCache(feed=HolidayFeedClient(transport=feed.transport), store=Cache(clock=clock), ttl=86400)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


@pytest.fixture
def client(engine, db, auth_session, holiday_cache, notifier):
    """TestClient with the database, caller, holiday feed and notifier overridden."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_session] = lambda: auth_session
    app.dependency_overrides[get_holiday_cache] = lambda: holiday_cache
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_notification_session_factory] = lambda: sessionmaker(bind=engine)
    app.dependency_overrides[get_reminder_notifier] = lambda: notifier

    yield TestClient(app)

    app.dependency_overrides.clear()
