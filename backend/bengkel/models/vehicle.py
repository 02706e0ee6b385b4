"""
Modello SQLAlchemy per l'entità Vehicle
Progetto: Bengkel Manager (Gestionale Officina)

Il proprietario è referenziato per user_id; il profilo viene risolto
a parte (vedi VehicleService.resolve_owners), non tramite relationship.
"""

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bengkel.models import Base
from bengkel.models.mixins import TimestampMixin, UUIDMixin


class Vehicle(Base, UUIDMixin, TimestampMixin):
    """
    Veicolo di un cliente.

    Attributes:
        user_id: UUID dell'account proprietario
        plate_number: Targa (univoca)
        brand: Marca
        model: Modello
        year: Anno di immatricolazione
        mileage: Chilometraggio
    """

    __tablename__ = "vehicles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID dell'account proprietario",
    )

    plate_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        doc="Targa del veicolo",
    )

    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mileage: Mapped[int | None] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        Index("ix_vehicles_user_id", "user_id"),
    )

    @property
    def display_name(self) -> str:
        """Stringa "TARGA - Marca Modello"."""
        label = " ".join(part for part in (self.brand, self.model) if part)
        return f"{self.plate_number} - {label}" if label else self.plate_number

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id}, plate={self.plate_number})>"
