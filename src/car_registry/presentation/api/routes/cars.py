"""Car endpoints with database integration."""

from fastapi import APIRouter, Path

from car_registry.infrastructure.logging import get_logger
from car_registry.infrastructure.services import get_service_factory
from car_registry.presentation.api.schemas.car_schemas import (
    CarCreateRequest,
    CarListResponse,
    CarResponse,
    CarYearUpdateRequest,
    ErrorResponse,
    ToggleDeleteResponse,
)

router = APIRouter()
logger = get_logger(__name__)


@router.delete(
    "/{car_id}",
    response_model=ToggleDeleteResponse,
    responses={422: {"model": ErrorResponse}}
)
async def toggle_car_deleted(
    car_id: int = Path(..., description="ID of the car whose deleted flag is flipped")
) -> ToggleDeleteResponse:
    """Toggle whether a car is soft-deleted.

    Always acknowledges success; a car ID that matches nothing is a no-op.
    """
    logger.info("Toggling deleted flag", extra={"car_id": car_id})

    async with get_service_factory().get_car_service() as car_service:
        await car_service.toggle_car_deleted(car_id)

    return ToggleDeleteResponse(success=True)


@router.get("", response_model=CarListResponse)
async def list_active_cars() -> CarListResponse:
    """List all cars that are not soft-deleted."""
    logger.info("Listing active cars")

    async with get_service_factory().get_car_service() as car_service:
        cars = await car_service.list_active_cars()

    return CarListResponse(cars=[CarResponse.from_entity(car) for car in cars])


@router.put(
    "",
    response_model=CarResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}
)
async def update_car_year(request: CarYearUpdateRequest) -> CarResponse:
    """Update the model year of a car and return the stored record."""
    logger.info("Updating car year", extra={"car_id": request.id, "year": request.year})

    async with get_service_factory().get_car_service() as car_service:
        car = await car_service.update_car_year(request.id, request.year)

    return CarResponse.from_entity(car)


@router.post(
    "",
    response_model=CarResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}}
)
async def create_car(request: CarCreateRequest) -> CarResponse:
    """Create a car record."""
    logger.info("Creating car", extra={"payload": request.model_dump()})

    async with get_service_factory().get_car_service() as car_service:
        car = await car_service.create_car(
            year=request.year,
            make=request.make,
            model=request.model,
            deleted_flag=request.deleted_flag
        )

    return CarResponse.from_entity(car)
