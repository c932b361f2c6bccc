"""In-memory repository implementations for testing and development."""

from itertools import count
from typing import Dict, List, Optional

from car_registry.application.ports.repositories import CarRepository
from car_registry.domain.entities.car import Car


class InMemoryCarRepository(CarRepository):
    """In-memory implementation of car repository."""

    def __init__(self):
        self._cars: Dict[int, Car] = {}
        # IDs keep increasing and are never handed out twice
        self._id_sequence = count(1)

    async def add(self, year: int, make: str, model: str, deleted_flag: int) -> Car:
        """Insert a car with the next ID."""
        car = Car(next(self._id_sequence), year, make, model, deleted_flag)
        self._cars[car.id] = car
        return car

    async def find_by_id(self, car_id: int) -> Optional[Car]:
        """Find car by ID."""
        return self._cars.get(car_id)

    async def find_active(self) -> List[Car]:
        """Find all cars that are not soft-deleted."""
        return [car for car_id, car in sorted(self._cars.items()) if not car.is_deleted]

    async def update_year(self, car_id: int, year: int) -> Optional[Car]:
        """Set the model year of a car."""
        car = self._cars.get(car_id)
        if car is None:
            return None

        self._cars[car_id] = car.with_year(year)
        return self._cars[car_id]

    async def toggle_deleted(self, car_id: int) -> bool:
        """Flip the soft-delete marker of a car."""
        car = self._cars.get(car_id)
        if car is None:
            return False

        self._cars[car_id] = car.toggled()
        return True
