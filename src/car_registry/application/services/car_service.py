"""Car service implementing use cases for vehicle record management."""

from typing import List

from ..ports.repositories import CarRepository
from ...domain.entities.car import Car, MIN_MODEL_YEAR, MAX_MODEL_YEAR
from ...infrastructure.logging import get_logger


logger = get_logger(__name__)


class CarNotFoundError(LookupError):
    """Raised when no car matches the requested ID."""

    def __init__(self, car_id: int):
        super().__init__(f"Car not found: {car_id}")
        self.car_id = car_id


class ModelYearValidator:
    """Service for validating model years."""

    @staticmethod
    def validate(year: int) -> bool:
        """Validate model year range."""
        if isinstance(year, bool) or not isinstance(year, int):
            return False
        return MIN_MODEL_YEAR <= year <= MAX_MODEL_YEAR


class CarService:
    """Application service for car record management."""

    def __init__(self, car_repository: CarRepository):
        self._car_repository = car_repository
        self._year_validator = ModelYearValidator()

    async def list_active_cars(self) -> List[Car]:
        """Get all cars that are not soft-deleted."""
        return await self._car_repository.find_active()

    async def create_car(
        self,
        year: int,
        make: str,
        model: str,
        deleted_flag: int = Car.ACTIVE
    ) -> Car:
        """Create a new car record."""
        if not self._year_validator.validate(year):
            raise ValueError(f"Invalid model year: {year}")

        if deleted_flag not in (Car.ACTIVE, Car.DELETED):
            raise ValueError(f"Invalid deleted_flag: {deleted_flag}")

        car = await self._car_repository.add(year, make, model, int(deleted_flag))
        logger.info("Car created", extra={"car_id": car.id})
        return car

    async def update_car_year(self, car_id: int, year: int) -> Car:
        """Change the model year of a car and return the stored record."""
        if not self._year_validator.validate(year):
            raise ValueError(f"Invalid model year: {year}")

        car = await self._car_repository.update_year(car_id, year)
        if car is None:
            raise CarNotFoundError(car_id)

        return car

    async def toggle_car_deleted(self, car_id: int) -> bool:
        """Flip the soft-delete marker of a car.

        A missing car is not an error: the toggle is a no-op and False is returned.
        """
        affected = await self._car_repository.toggle_deleted(car_id)
        if not affected:
            logger.warning("Delete toggle matched no car", extra={"car_id": car_id})
        return affected
