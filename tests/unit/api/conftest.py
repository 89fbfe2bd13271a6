"""Fixtures for API route tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from academia.api import register_exception_handlers
from academia.api.dependencies import get_store
from academia.api.routes import enrollments, offerings, students
from academia.store import AcademiaStore


@pytest.fixture
def app(store: AcademiaStore):
    """Create a test FastAPI app backed by the in-memory store."""
    app = FastAPI()

    # Override store dependency
    def override_get_store():
        yield store

    app.dependency_overrides[get_store] = override_get_store

    register_exception_handlers(app)

    # Include routes
    app.include_router(offerings.router, prefix="/api/v1")
    app.include_router(enrollments.router, prefix="/api/v1")
    app.include_router(students.router, prefix="/api/v1")

    return app


@pytest.fixture
def client(app: FastAPI):
    """Create a test client."""
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
