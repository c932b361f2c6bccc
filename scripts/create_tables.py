"""Script to initialize the car table."""

import asyncio

from car_registry.infrastructure.services import ServiceFactory
from car_registry.presentation.api.config import get_settings


async def create_tables():
    """Create all database tables."""
    factory = ServiceFactory.from_settings(get_settings())
    await factory.initialize()

    try:
        await factory.database_manager.create_tables()
        print("✅ Database tables created successfully!")

    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        raise
    finally:
        await factory.shutdown()


if __name__ == "__main__":
    asyncio.run(create_tables())
