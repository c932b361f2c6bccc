"""SQLAlchemy repository implementations."""

from typing import List, Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from car_registry.application.ports.repositories import CarRepository
from car_registry.domain.entities.car import Car
from car_registry.infrastructure.database.models import CarModel
from car_registry.infrastructure.logging import get_logger, log_database_operation


class SQLAlchemyCarRepository(CarRepository):
    """SQLAlchemy implementation of car repository."""

    def __init__(self, session: AsyncSession):
        self._session = session
        self._logger = get_logger(__name__)

    async def add(self, year: int, make: str, model: str, deleted_flag: int) -> Car:
        """Insert a car; the generated ID is read back from the flushed row."""
        log_database_operation(self._logger, "INSERT", CarModel.__tablename__, make=make, model=model)

        car_model = CarModel(year=year, make=make, model=model, deleted_flag=deleted_flag)
        self._session.add(car_model)
        await self._session.flush()

        return self._model_to_entity(car_model)

    async def find_by_id(self, car_id: int) -> Optional[Car]:
        """Find car by ID."""
        stmt = (
            select(CarModel)
            .where(CarModel.id == car_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        car_model = result.scalar_one_or_none()

        if not car_model:
            return None

        return self._model_to_entity(car_model)

    async def find_active(self) -> List[Car]:
        """Find all cars that are not soft-deleted."""
        log_database_operation(self._logger, "SELECT", CarModel.__tablename__, filter="deleted_flag = 0")

        stmt = select(CarModel).where(CarModel.deleted_flag == Car.ACTIVE).order_by(CarModel.id)
        result = await self._session.execute(stmt)
        car_models = result.scalars().all()

        self._logger.debug("Active cars loaded", extra={"car_count": len(car_models)})
        return [self._model_to_entity(model) for model in car_models]

    async def update_year(self, car_id: int, year: int) -> Optional[Car]:
        """Set the model year and read the row back within the same transaction."""
        log_database_operation(self._logger, "UPDATE", CarModel.__tablename__, car_id=car_id, year=year)

        stmt = (
            update(CarModel)
            .where(CarModel.id == car_id)
            .values(year=year)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

        # rowcount is unreliable here: MySQL may count only changed rows
        return await self.find_by_id(car_id)

    async def toggle_deleted(self, car_id: int) -> bool:
        """Flip deleted_flag with a single conditional update."""
        log_database_operation(self._logger, "UPDATE", CarModel.__tablename__, car_id=car_id, action="toggle_deleted")

        stmt = (
            update(CarModel)
            .where(CarModel.id == car_id)
            .values(deleted_flag=case((CarModel.deleted_flag == Car.ACTIVE, Car.DELETED), else_=Car.ACTIVE))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        return result.rowcount > 0

    def _model_to_entity(self, model: CarModel) -> Car:
        """Convert database model to domain entity."""
        return Car(
            car_id=model.id,
            year=model.year,
            make=model.make,
            model=model.model,
            deleted_flag=model.deleted_flag
        )
