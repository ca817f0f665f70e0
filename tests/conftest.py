"""
Shared fixtures: an app built from explicit test settings against a
throwaway SQLite file, and clients that hold their own session cookies.
"""
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from hostelmart.config import Settings
from hostelmart.main import create_app

TEST_SECRET = "test-jwt-secret-key-for-testing-only-0123456789"
PASSWORD = "hunter2-but-longer"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_SECRET,
        # Minimum bcrypt cost keeps the suite fast; the default is 12
        bcrypt_rounds=4,
    )


@pytest.fixture
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Context manager runs the lifespan, which creates the tables
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_client(app, client) -> Callable[[], TestClient]:
    """Extra clients on the same app, each with an empty cookie jar."""
    def _make() -> TestClient:
        return TestClient(app)
    return _make


def registration(**overrides) -> dict:
    body = {
        "name": "Asha Verma",
        "email": "asha@campus.edu",
        "password": PASSWORD,
        "hostel": "Kaveri",
        "roomNumber": "B-214",
        "whatsappNumber": "919876543210",
    }
    body.update(overrides)
    return body


@pytest.fixture
def register(client) -> Callable[..., dict]:
    """Register an account through the API on a given client."""
    def _register(on: TestClient = None, **overrides) -> dict:
        res = (on or client).post("/api/auth/register", json=registration(**overrides))
        assert res.status_code == 201, res.text
        return res.json()
    return _register


@pytest.fixture
def seller(client, register) -> dict:
    """Default client, signed in as a registered seller."""
    return register()


def product_body(**overrides) -> dict:
    body = {
        "name": "Engineering Mathematics",
        "description": "BS Grewal, 44th edition, a few pencil marks",
        "price": 350,
        "category": "books",
        "images": [],
        "hostel": "Kaveri",
        "roomNumber": "B-214",
    }
    body.update(overrides)
    return body
