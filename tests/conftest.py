import os

# Must be set before tradelink.database creates its engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import date, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tradelink.database import Base, engine  # noqa: E402
from tradelink.domain.scheduling.entities import (  # noqa: E402
    Availability,
    BookedSlot,
    ContractorCalendar,
    WorkingHours,
)
from tradelink.domain.scheduling.router import get_clock  # noqa: E402
from tradelink.main import app  # noqa: E402

# Monday 2024-05-13, 08:00
FIXED_NOW = datetime(2024, 5, 13, 8, 0)
MONDAY = date(2024, 5, 13)
TUESDAY = date(2024, 5, 14)
SATURDAY = date(2024, 5, 18)
SUNDAY = date(2024, 5, 12)


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def contractor(client):
    response = client.post(
        "/users",
        json={
            "name": "John Smith",
            "email": "john@buildright.com",
            "role": "contractor",
            "company": "BuildRight",
            "specialty": "Kitchen Remodeling",
        },
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def realtor(client):
    response = client.post(
        "/users",
        json={"name": "Emma Wilson", "email": "emma@homes.com", "role": "realtor", "company": "Homes"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def other_realtor(client):
    response = client.post(
        "/users",
        json={"name": "Liam Brown", "email": "liam@homes.com", "role": "realtor"},
    )
    assert response.status_code == 201
    return response.json()


def make_availability(start="09:00", end="10:00", days=(1, 2, 3, 4, 5), duration=30, booked=()):
    return Availability(
        working_hours=WorkingHours(start=start, end=end),
        working_days=frozenset(days),
        meeting_duration=duration,
        booked_slots=tuple(booked),
    )


def make_calendar(**kwargs) -> ContractorCalendar:
    return ContractorCalendar(contractor_id="c-1", availability=make_availability(**kwargs))


def booked(on_date, start_time, end_time="", realtor_id="r-9", notes=""):
    return BookedSlot(
        date=on_date, start_time=start_time, end_time=end_time, realtor_id=realtor_id, notes=notes
    )
