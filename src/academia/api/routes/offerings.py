"""Course offering endpoints."""

from fastapi import APIRouter, Query, status

from academia.api.dependencies import EnrollmentServiceDep, StoreDep
from academia.api.models import (
    APIResponse,
    EnrollmentResponse,
    ModalityStatsResponse,
    OccupancyResponse,
    OfferingCreate,
    OfferingResponse,
    OfferingStatsResponse,
    OfferingUpdate,
    StartOfferingResponse,
    enrollment_to_response,
    occupancy_to_response,
    offering_to_response,
)

router = APIRouter(prefix="/offerings", tags=["offerings"])


@router.get("", response_model=APIResponse[list[OfferingResponse]])
def list_offerings(
    store: StoreDep,
    active_only: bool = Query(default=True, description="Exclude deactivated offerings"),
    instructor_id: str | None = Query(default=None, description="Filter by instructor ID"),
    subject_id: str | None = Query(default=None, description="Filter by subject ID"),
    timing: str | None = Query(
        default=None, pattern="^(upcoming|current)$", description="upcoming or current"
    ),
    with_seats: bool = Query(default=False, description="Only offerings with free seats"),
) -> APIResponse[list[OfferingResponse]]:
    """List offerings with optional filters."""
    offerings = store.list_offerings(
        active_only=active_only,
        instructor_id=instructor_id,
        subject_id=subject_id,
        timing=timing,
        with_seats=with_seats,
    )
    return APIResponse(data=[offering_to_response(o) for o in offerings])


@router.post(
    "",
    response_model=APIResponse[OfferingResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_offering(offering: OfferingCreate, store: StoreDep) -> APIResponse[OfferingResponse]:
    """Create a new course offering."""
    created = store.create_offering(
        subject_id=offering.subject_id,
        instructor_id=offering.instructor_id,
        name=offering.name,
        description=offering.description,
        start_date=offering.start_date,
        end_date=offering.end_date,
        modality=offering.modality,
        room=offering.room,
        schedule=offering.schedule,
        max_seats=offering.max_seats,
    )
    return APIResponse(data=offering_to_response(created))


@router.get("/stats", response_model=APIResponse[OfferingStatsResponse])
def get_offering_stats(store: StoreDep) -> APIResponse[OfferingStatsResponse]:
    """Get aggregated offering statistics."""
    stats = store.get_offering_stats()
    return APIResponse(data=OfferingStatsResponse.model_validate(stats))


@router.get("/stats/modality", response_model=APIResponse[list[ModalityStatsResponse]])
def get_stats_by_modality(store: StoreDep) -> APIResponse[list[ModalityStatsResponse]]:
    """Get offering count and enrolled students per modality."""
    stats = store.get_stats_by_modality()
    return APIResponse(data=[ModalityStatsResponse.model_validate(s) for s in stats])


@router.get("/{offering_id}", response_model=APIResponse[OfferingResponse])
def get_offering(offering_id: str, store: StoreDep) -> APIResponse[OfferingResponse]:
    """Get an offering by ID."""
    offering = store.get_offering(offering_id)
    return APIResponse(data=offering_to_response(offering))


@router.patch("/{offering_id}", response_model=APIResponse[OfferingResponse])
def update_offering(
    offering_id: str, offering: OfferingUpdate, store: StoreDep
) -> APIResponse[OfferingResponse]:
    """Update an offering (partial update)."""
    updated = store.update_offering(offering_id, **offering.model_dump(exclude_unset=True))
    return APIResponse(data=offering_to_response(updated))


@router.delete("/{offering_id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_offering(offering_id: str, store: StoreDep) -> None:
    """Deactivate an offering. Offerings are never hard-deleted."""
    store.deactivate_offering(offering_id)


@router.get("/{offering_id}/occupancy", response_model=APIResponse[OccupancyResponse])
def get_offering_occupancy(
    offering_id: str, service: EnrollmentServiceDep
) -> APIResponse[OccupancyResponse]:
    """Get seat usage of an offering."""
    report = service.get_offering_occupancy(offering_id)
    return APIResponse(data=occupancy_to_response(report))


@router.get("/{offering_id}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_offering_enrollments(
    offering_id: str, store: StoreDep
) -> APIResponse[list[EnrollmentResponse]]:
    """List the enrollments of an offering, oldest first."""
    # Verify offering exists (will raise OfferingNotFoundError if not)
    store.get_offering(offering_id)

    enrollments = store.list_enrollments(offering_id=offering_id)
    return APIResponse(data=[enrollment_to_response(e) for e in enrollments])


@router.post("/{offering_id}/start", response_model=APIResponse[StartOfferingResponse])
def start_offering(
    offering_id: str, service: EnrollmentServiceDep
) -> APIResponse[StartOfferingResponse]:
    """Mark every enrolled student of the offering as in progress."""
    started = service.start_offering(offering_id)
    return APIResponse(data=StartOfferingResponse(offering_id=offering_id, started=started))


@router.post("/{offering_id}/reconcile", response_model=APIResponse[OccupancyResponse])
def reconcile_offering(
    offering_id: str, service: EnrollmentServiceDep
) -> APIResponse[OccupancyResponse]:
    """Rebuild the seat count from the offering's enrollments."""
    report = service.reconcile_offering(offering_id)
    return APIResponse(data=occupancy_to_response(report))
