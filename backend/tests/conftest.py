from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from climate_api.main import app
from climate_api.models import UserAccount
from climate_api.routers.dependencies import get_climate_repository, get_user_repository
from climate_api.services import ClimateRepository, UserRepository


@pytest.fixture
def collection():
    """Stands in for a pymongo Collection."""
    return MagicMock()


@pytest.fixture
def connection(collection):
    """MongoConnection whose every collection is the `collection` mock."""
    conn = MagicMock()
    conn.get_collection.return_value = collection
    return conn


@pytest.fixture
def climate_repository(connection):
    return ClimateRepository(connection, precipitation_lookback_months=50)


@pytest.fixture
def user_repository(connection):
    return UserRepository(connection)


@pytest.fixture
def object_id():
    return ObjectId("65f1c2a4e4b0a1b2c3d4e5f6")


@pytest.fixture
def teacher():
    return UserAccount(
        id=str(ObjectId()),
        name="Tess Teacher",
        email="tess@example.edu",
        role="Teacher",
        last_access=datetime(2024, 1, 1, tzinfo=timezone.utc),
        api_key="teacher-key",
    )


@pytest.fixture
def mock_climate_repo():
    """Mocks the ClimateRepository handed to the routers."""
    return MagicMock()


@pytest.fixture
def mock_user_repo(teacher):
    """Mocks the UserRepository; by default the caller is a Teacher."""
    repo = MagicMock()
    repo.authenticate.return_value = teacher
    return repo


@pytest.fixture
def client(mock_climate_repo, mock_user_repo):
    """TestClient with both repositories swapped for mocks (no lifespan, no MongoDB)."""
    app.dependency_overrides[get_climate_repository] = lambda: mock_climate_repo
    app.dependency_overrides[get_user_repository] = lambda: mock_user_repo
    yield TestClient(app)
    app.dependency_overrides.clear()
