"""REST API for Academia."""

from academia.api.app import create_app, register_exception_handlers
from academia.api.models import (
    APIResponse,
    EnrollmentCreate,
    EnrollmentResponse,
    OfferingCreate,
    OfferingResponse,
    OfferingUpdate,
)

__all__ = [
    "APIResponse",
    "EnrollmentCreate",
    "EnrollmentResponse",
    "OfferingCreate",
    "OfferingResponse",
    "OfferingUpdate",
    "create_app",
    "register_exception_handlers",
]
