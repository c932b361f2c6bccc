"""Dependency injection and service factory."""

from typing import AsyncGenerator
from contextlib import asynccontextmanager

from car_registry.infrastructure.database.connection import DatabaseManager
from car_registry.infrastructure.repositories.sql_repositories import SQLAlchemyCarRepository
from car_registry.application.services.car_service import CarService
from car_registry.presentation.api.config import Settings, get_settings


class ServiceFactory:
    """Factory for creating application services with proper dependencies."""

    def __init__(self, database_manager: DatabaseManager):
        self.database_manager = database_manager
        self._connected = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceFactory":
        """Build a factory whose database manager follows the given settings."""
        database_manager = DatabaseManager(
            settings.sqlalchemy_database_url,
            sql_mode=settings.db_sql_mode,
            time_zone=settings.db_time_zone,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.db_echo
        )
        return cls(database_manager)

    async def initialize(self):
        """Initialize the service factory."""
        if not self._connected:
            await self.database_manager.connect()
            self._connected = True

    async def shutdown(self):
        """Shutdown the service factory."""
        if self._connected:
            await self.database_manager.disconnect()
            self._connected = False

    @asynccontextmanager
    async def get_car_service(self) -> AsyncGenerator[CarService, None]:
        """Get car service bound to one request-scoped database session."""
        async with self.database_manager.get_session() as session:
            yield CarService(car_repository=SQLAlchemyCarRepository(session))


# Global service factory instance
_service_factory: ServiceFactory | None = None


def get_service_factory() -> ServiceFactory:
    """Get the global service factory instance."""
    global _service_factory

    if _service_factory is None:
        _service_factory = ServiceFactory.from_settings(get_settings())

    return _service_factory


def set_service_factory(factory: ServiceFactory | None) -> None:
    """Replace the global service factory (None resets to settings-driven)."""
    global _service_factory
    _service_factory = factory


async def initialize_services():
    """Initialize application services."""
    factory = get_service_factory()
    await factory.initialize()


async def shutdown_services():
    """Shutdown application services."""
    factory = get_service_factory()
    await factory.shutdown()
