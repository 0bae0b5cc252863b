"""
Test configuration and fixtures for the classifieds API.
Provides database fixtures, a fake storage backend, test data factories and common test utilities.
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-classifieds-suite"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_URL"] = "https://storage.test"
os.environ["STORAGE_KEY"] = "test-service-key"
os.environ["STORAGE_BUCKET"] = "house-images"

import json
import uuid
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import Database
from app.main import app
from app.models.user import User
from app.schemas.listing import ListingCreate
from app.services.auth import AuthService
from app.services.listing import ListingService
from app.services.media import MediaService
from app.storage import StorageClient


STORAGE_URL = "https://storage.test"
BUCKET = "house-images"


@pytest.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory database with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(engine)
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session() as session:
        yield session


class FakeStorageBackend:
    """
    In-memory stand-in for the storage REST API, served through httpx.MockTransport.
    Set `fail_with` to a status code to make every call fail.
    """

    def __init__(self, bucket: str = BUCKET):
        self.bucket = bucket
        self.objects: Dict[str, Tuple[bytes, str]] = {}
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[int] = None

    @property
    def object_prefix(self) -> str:
        return f"/storage/v1/object/{self.bucket}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with:
            return httpx.Response(self.fail_with, json={"error": "storage unavailable"})

        path = request.url.path
        if request.method == "POST" and path.startswith(self.object_prefix + "/"):
            key = path[len(self.object_prefix) + 1:]
            if key in self.objects and request.headers.get("x-upsert") != "true":
                return httpx.Response(409, json={"error": "Duplicate", "message": "The resource already exists"})
            self.objects[key] = (request.content, request.headers.get("content-type", ""))
            return httpx.Response(200, json={"Key": f"{self.bucket}/{key}"})

        if request.method == "DELETE" and path == self.object_prefix:
            prefixes = json.loads(request.content)["prefixes"]
            removed = [{"name": key} for key in prefixes if self.objects.pop(key, None) is not None]
            return httpx.Response(200, json=removed)

        return httpx.Response(404, json={"error": "not_found"})


@pytest.fixture
def storage_backend() -> FakeStorageBackend:
    return FakeStorageBackend()


@pytest.fixture
async def storage_client(storage_backend: FakeStorageBackend) -> AsyncGenerator[StorageClient, None]:
    transport = httpx.MockTransport(storage_backend.handler)
    async with httpx.AsyncClient(transport=transport) as http_client:
        yield StorageClient(STORAGE_URL, "test-service-key", BUCKET, http_client)


@pytest.fixture
async def async_client(
    database: Database,
    storage_client: StorageClient
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Async client talking to the app in-process.
    The lifespan does not run, so the database and storage are placed on app.state here.
    """
    app.state.database = database
    app.state.storage = storage_client

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    del app.state.database
    del app.state.storage


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    """Create an auth service instance."""
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession) -> ListingService:
    """Create a listing service instance."""
    return ListingService(db_session)


@pytest.fixture
def media_service(storage_client: StorageClient) -> MediaService:
    return MediaService(storage_client)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        name: str = "Test User",
        email: Optional[str] = None,
        phone: Optional[str] = None,
        password: str = "testpassword123"
    ) -> dict:
        """Create registration data dictionary."""
        suffix = uuid.uuid4().hex[:8]
        return {
            "name": name,
            "email": email or f"user{suffix}@example.com",
            "phone": phone or f"+2547{int(suffix, 16) % 10 ** 8:08d}",
            "password": password,
        }

    @staticmethod
    async def create_user(auth_service: AuthService, **overrides) -> Tuple[User, str]:
        """Register a user and return it with its token."""
        return await auth_service.register(**UserFactory.create_user_data(**overrides))


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def image_urls(count: int = 1) -> List[str]:
        return [
            f"{STORAGE_URL}/storage/v1/object/public/{BUCKET}/listings/1/{index}-photo.jpg"
            for index in range(count)
        ]

    @staticmethod
    def create_listing_data(
        title: str = "2 bedroom apartment",
        description: Optional[str] = "Spacious apartment with a balcony",
        category: str = "apartment",
        location: str = "Kilimani",
        county: str = "Nairobi",
        phone: str = "+254700000000",
        amenities: Optional[List[str]] = None,
        image_count: int = 1,
        **overrides
    ) -> dict:
        data = {
            "title": title,
            "description": description,
            "category": category,
            "location": location,
            "county": county,
            "phone": phone,
            "images": ListingFactory.image_urls(image_count),
        }
        if amenities is not None:
            data["amenities"] = amenities
        data.update(overrides)
        return data

    @staticmethod
    def create_listing_schema(**kwargs) -> ListingCreate:
        return ListingCreate(**ListingFactory.create_listing_data(**kwargs))


# Common test fixtures
@pytest.fixture
async def test_user(auth_service: AuthService) -> Tuple[User, str]:
    """Registered user and its token."""
    return await UserFactory.create_user(auth_service, name="Jane Owner", email="owner@example.com")


@pytest.fixture
async def other_user(auth_service: AuthService) -> Tuple[User, str]:
    """A second registered user."""
    return await UserFactory.create_user(auth_service, name="John Stranger", email="stranger@example.com")


# Utility functions for tests
def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_via_api(client: httpx.AsyncClient, **overrides) -> dict:
    """Register through the API and return the response body."""
    response = await client.post("/api/auth/register", json=UserFactory.create_user_data(**overrides))
    assert response.status_code == 201, response.text
    return response.json()
