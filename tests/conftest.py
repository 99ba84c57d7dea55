import uuid

import mongomock
import pytest

from entitystore import JSONFileBackend, MongoBackend, StorageService, TimeUnit
from entitystore.scheduling import ManualClock, ManualScheduler

from tests.models import Note, Player

@pytest.fixture
def clock():
    return ManualClock()

@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)

@pytest.fixture
def json_backend(tmp_path):
    return JSONFileBackend(tmp_path / "db")

@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()

@pytest.fixture
def mongo_backend(mongo_client):
    return MongoBackend(client=mongo_client, database_name="entitystore_test")

@pytest.fixture
def make_player():
    def factory(name: str = "alice", score: int = 0) -> Player:
        return Player(uuid=uuid.uuid4(), name=name, score=score)
    return factory

@pytest.fixture
def note_service(json_backend, scheduler, clock):
    """Started JSON-backed Note service with a 2 second cache TTL"""
    service = StorageService(Note, json_backend, cache_time=2, cache_time_unit=TimeUnit.SECONDS,
                             scheduler=scheduler, clock=clock)
    service.startup()
    return service
