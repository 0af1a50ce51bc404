"""
Pytest configuration and shared fixtures.
"""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from satsmap.core.database import init_db
from satsmap.services.location_store import LocationStore
from satsmap.services.tasks import ScheduledTask, TaskScheduler


class FakeClock:
    """Wall clock that only moves when told to"""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeTask(ScheduledTask):
    def __init__(self, name, func, due_at):
        self.name = name
        self.func = func
        self.due_at = due_at
        self.cancelled = False
        self.ran = False

    @property
    def id(self):
        return self.name

    def cancel(self):
        self.cancelled = True


class FakeTaskScheduler(TaskScheduler):
    """Records delayed tasks and runs them when simulated time passes"""

    def __init__(self):
        self.now = 0.0
        self.tasks = []

    def schedule(self, delay_seconds, func, name):
        task = FakeTask(name, func, self.now + delay_seconds)
        self.tasks.append(task)
        return task

    @property
    def pending(self):
        return [t for t in self.tasks if not t.cancelled and not t.ran]

    async def advance(self, seconds):
        self.now += seconds
        for task in list(self.pending):
            if task.due_at <= self.now:
                task.ran = True
                await task.func()


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(session_factory, clock):
    return LocationStore(session_factory, clock=clock)


@pytest.fixture
def task_scheduler():
    return FakeTaskScheduler()


@pytest.fixture
def create_btcmap_record():
    """Fixture that returns a function to create btcmap.org feed records."""

    def _create_btcmap_record(osm_id, osm_type="node", osm_tags=None, tags=None, **osm_fields):
        osm_json = {
            "type": osm_type,
            "id": osm_id,
            "timestamp": "2023-01-01T00:00:00Z",
            "version": 1,
            "changeset": 123456,
            "user": "testuser",
            "uid": 12345,
            "tags": osm_tags if osm_tags is not None else {"name": f"Place {osm_id}"},
        }
        if osm_type == "node":
            osm_fields.setdefault("lat", 51.5074)
            osm_fields.setdefault("lon", -0.1278)
        osm_json.update(osm_fields)

        return {
            "id": f"{osm_type}:{osm_id}",
            "osm_json": osm_json,
            "tags": tags if tags is not None else {},
            "created_at": "2023-01-01T00:00:00Z",
            "updated_at": "2023-01-01T00:00:00Z",
            "deleted_at": None,
        }

    return _create_btcmap_record


@pytest.fixture
def create_overpass_element():
    """Fixture that returns a function to create Overpass elements."""

    def _create_overpass_element(element_id, element_type="node", tags=None, **fields):
        element = {"type": element_type, "id": element_id}
        if element_type == "node":
            fields.setdefault("lat", 40.7128)
            fields.setdefault("lon", -74.0060)
        element.update(fields)
        element["tags"] = tags if tags is not None else {"payment:bitcoin": "yes"}
        return element

    return _create_overpass_element
