"""Car entity representing a single vehicle record."""

from typing import Any, Dict

# Oldest production automobile through a generous upper bound for upcoming models
MIN_MODEL_YEAR = 1886
MAX_MODEL_YEAR = 2100


class Car:
    """Vehicle record identified by a store-generated id.

    Records are never physically removed; ``deleted_flag`` marks a record
    as inactive (1) or active (0).
    """

    ACTIVE = 0
    DELETED = 1

    def __init__(
        self,
        car_id: int,
        year: int,
        make: str,
        model: str,
        deleted_flag: int = ACTIVE
    ):
        if deleted_flag not in (self.ACTIVE, self.DELETED):
            raise ValueError(f"deleted_flag must be 0 or 1, got {deleted_flag!r}")

        self._id = car_id
        self._year = year
        self._make = make
        self._model = model
        self._deleted_flag = int(deleted_flag)

    @property
    def id(self) -> int:
        """Get car ID."""
        return self._id

    @property
    def year(self) -> int:
        """Get model year."""
        return self._year

    @property
    def make(self) -> str:
        """Get manufacturer name."""
        return self._make

    @property
    def model(self) -> str:
        """Get model name."""
        return self._model

    @property
    def deleted_flag(self) -> int:
        """Get soft-delete marker."""
        return self._deleted_flag

    @property
    def is_deleted(self) -> bool:
        """Check if the record is soft-deleted."""
        return self._deleted_flag == self.DELETED

    def with_year(self, year: int) -> "Car":
        """Return a copy of this car with a different model year."""
        return Car(self._id, year, self._make, self._model, self._deleted_flag)

    def toggled(self) -> "Car":
        """Return a copy of this car with the soft-delete marker flipped."""
        flag = self.ACTIVE if self.is_deleted else self.DELETED
        return Car(self._id, self._year, self._make, self._model, flag)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self._id,
            "year": self._year,
            "make": self._make,
            "model": self._model,
            "deleted_flag": self._deleted_flag,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Car):
            return False
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Car(id={self._id}, year={self._year}, make='{self._make}', model='{self._model}', deleted_flag={self._deleted_flag})"
