"""Port interfaces for repositories (Dependency Inversion Principle)."""

from abc import ABC, abstractmethod
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from car_registry.domain.entities.car import Car


class CarRepository(ABC):
    """Port interface for car repository."""

    @abstractmethod
    async def add(self, year: int, make: str, model: str, deleted_flag: int) -> "Car":
        """Insert a new car and return it with its generated ID."""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, car_id: int) -> Optional["Car"]:
        """Find car by ID, including soft-deleted ones."""
        raise NotImplementedError

    @abstractmethod
    async def find_active(self) -> List["Car"]:
        """Find all cars that are not soft-deleted."""
        raise NotImplementedError

    @abstractmethod
    async def update_year(self, car_id: int, year: int) -> Optional["Car"]:
        """Set the model year of a car and read the row back.

        Returns None when no row matches ``car_id``.
        """
        raise NotImplementedError

    @abstractmethod
    async def toggle_deleted(self, car_id: int) -> bool:
        """Flip the soft-delete marker of a car.

        Returns True when a row was affected.
        """
        raise NotImplementedError
