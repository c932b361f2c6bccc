"""Pydantic schemas for car API requests and responses."""

from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict, Field

from car_registry.domain.entities.car import Car, MIN_MODEL_YEAR, MAX_MODEL_YEAR


class CarCreateRequest(BaseModel):
    """Request model for creating a car."""
    model_config = ConfigDict(str_strip_whitespace=True)

    year: int = Field(..., ge=MIN_MODEL_YEAR, le=MAX_MODEL_YEAR, description="Vehicle model year")
    make: str = Field(..., min_length=1, max_length=50, description="Manufacturer name")
    model: str = Field(..., min_length=1, max_length=50, description="Model name")
    deleted_flag: int = Field(Car.ACTIVE, ge=Car.ACTIVE, le=Car.DELETED, description="Soft-delete marker, 0 or 1")


class CarYearUpdateRequest(BaseModel):
    """Request model for changing a car's model year."""
    id: int = Field(..., ge=1, description="ID of the car to update")
    year: int = Field(..., ge=MIN_MODEL_YEAR, le=MAX_MODEL_YEAR, description="New model year")


class CarResponse(BaseModel):
    """Response model for a single car."""
    id: int
    year: int
    make: str
    model: str
    deleted_flag: int

    @classmethod
    def from_entity(cls, car: Car) -> "CarResponse":
        return cls(**car.to_dict())


class CarListResponse(BaseModel):
    """Response model for listing active cars."""
    cars: List[CarResponse]


class ToggleDeleteResponse(BaseModel):
    """Response model for the delete toggle."""
    success: bool


class ErrorResponse(BaseModel):
    """Response model for errors."""
    detail: Union[str, List[Any]]
    type: str
