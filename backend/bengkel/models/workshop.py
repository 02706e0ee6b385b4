"""
Modello SQLAlchemy per l'entità Workshop
Progetto: Bengkel Manager (Gestionale Officina)
"""

import uuid

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from bengkel.models import Base
from bengkel.models.mixins import TimestampMixin, UUIDMixin


class Workshop(Base, UUIDMixin, TimestampMixin):
    """
    Sede dell'officina.

    Attributes:
        user_id: UUID dell'account che ha registrato la sede
        name: Nome dell'officina
        address: Indirizzo
        phone: Telefono
        open_hours: Orari di apertura (testo libero)
    """

    __tablename__ = "workshops"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        doc="UUID dell'account che gestisce la sede",
    )

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    open_hours: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Workshop(id={self.id}, name={self.name})>"
