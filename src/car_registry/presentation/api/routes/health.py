"""Health check endpoints."""

from fastapi import APIRouter

from car_registry import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": "car-registry"}


@router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Car Registry API", "version": __version__}
