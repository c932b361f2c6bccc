"""Run the Car Registry API with uvicorn.

Usage:
    python -m car_registry
"""

import uvicorn

from car_registry.presentation.api.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "car_registry.presentation.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
