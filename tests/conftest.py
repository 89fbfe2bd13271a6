"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from academia.store import AcademiaStore, CourseOffering


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures

OfferingFactory = Callable[..., CourseOffering]


@pytest.fixture
def store():
    """Create an in-memory AcademiaStore for testing."""
    s = AcademiaStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def make_offering(store: AcademiaStore) -> OfferingFactory:
    """Factory creating offerings with sensible defaults."""

    def _make(**overrides: Any) -> CourseOffering:
        fields: dict[str, Any] = {
            "subject_id": "subj-math",
            "instructor_id": "inst-1",
            "name": "Algebra I",
            "start_date": datetime(2030, 2, 1),
            "end_date": datetime(2030, 6, 30),
            "modality": "on-site",
            "room": "A-101",
            "schedule": "Mon/Wed 10:00-12:00",
            "max_seats": 30,
        }
        fields.update(overrides)
        return store.create_offering(**fields)

    return _make
