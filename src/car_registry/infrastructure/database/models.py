"""SQLAlchemy database models."""

from sqlalchemy import CheckConstraint, Column, Integer, SmallInteger, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CarModel(Base):
    """SQLAlchemy model for cars."""

    __tablename__ = "car"
    __table_args__ = (
        CheckConstraint("deleted_flag IN (0, 1)", name="ck_car_deleted_flag"),
        # Keeps SQLite from handing out the id of a previously highest row again
        {"sqlite_autoincrement": True},
    )

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Vehicle details
    year = Column(Integer, nullable=False)
    make = Column(String(50), nullable=False)
    model = Column(String(50), nullable=False)

    # Soft-delete marker: 0 active, 1 deleted
    deleted_flag = Column(SmallInteger, nullable=False, default=0, server_default="0", index=True)

    def __repr__(self) -> str:
        return f"<CarModel(id={self.id}, make='{self.make}', model='{self.model}', deleted_flag={self.deleted_flag})>"
