"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from academia.enrollment import EnrollmentService
from academia.store import AcademiaStore
from academia.store.database import DEFAULT_BUSY_TIMEOUT

# Global AcademiaStore instance (initialized on app startup)
_store: AcademiaStore | None = None


def init_store(
    db_path: str = "academia.db", busy_timeout: float = DEFAULT_BUSY_TIMEOUT
) -> AcademiaStore:
    """Initialize the global AcademiaStore instance."""
    global _store  # noqa: PLW0603
    _store = AcademiaStore(db_path, busy_timeout=busy_timeout)
    return _store


def close_store() -> None:
    """Close the global AcademiaStore instance."""
    global _store  # noqa: PLW0603
    if _store is not None:
        _store.close()
        _store = None


def get_store() -> Generator[AcademiaStore, None, None]:
    """Dependency that provides the AcademiaStore instance."""
    if _store is None:
        raise RuntimeError("AcademiaStore not initialized. Call init_store() first.")
    yield _store


# Type alias for dependency injection
StoreDep = Annotated[AcademiaStore, Depends(get_store)]


def get_enrollment_service(store: StoreDep) -> EnrollmentService:
    """Dependency that provides an EnrollmentService bound to the store."""
    return EnrollmentService(store)


# Type alias for dependency injection
EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
