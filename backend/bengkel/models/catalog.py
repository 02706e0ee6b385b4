"""
Modelli SQLAlchemy per il Catalogo
Progetto: Bengkel Manager (Gestionale Officina)

Contiene:
- Service: servizi/interventi (jasa)
- Sparepart: ricambi con giacenza
- Package: pacchetti con ricambi inclusi
- PackageSparepart: composizione pacchetto → ricambi
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import List

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bengkel.models import Base
from bengkel.models.mixins import TimestampMixin, UUIDMixin


class Service(Base, UUIDMixin, TimestampMixin):
    """Servizio a listino (es. "Ganti Oli")."""

    __tablename__ = "services"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
        doc="Prezzo unitario",
    )

    __table_args__ = (
        Index("ix_services_name", "name"),
        CheckConstraint("price >= 0", name="ck_services_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name={self.name}, price={self.price})>"


class Sparepart(Base, UUIDMixin, TimestampMixin):
    """Ricambio a listino con giacenza."""

    __tablename__ = "spareparts"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
        doc="Prezzo unitario",
    )
    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Giacenza a magazzino",
    )

    __table_args__ = (
        Index("ix_spareparts_name", "name"),
        CheckConstraint("price >= 0", name="ck_spareparts_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Sparepart(id={self.id}, name={self.name}, price={self.price})>"


class Package(Base, UUIDMixin, TimestampMixin):
    """
    Pacchetto di servizio.

    Aggiungere N unità di un pacchetto in fattura aggiunge anche
    (quantità bundle × N) unità di ciascun ricambio incluso.

    Relationships:
        bundle: Righe di composizione (ricambio + quantità)
    """

    __tablename__ = "packages"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
        doc="Prezzo unitario del pacchetto",
    )
    duration_minutes: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        doc="Durata stimata dell'intervento in minuti",
    )

    bundle: Mapped[List["PackageSparepart"]] = relationship(
        "PackageSparepart",
        back_populates="package",
        cascade="all, delete-orphan",
        lazy="selectin",
        doc="Ricambi inclusi nel pacchetto",
    )

    @property
    def bundle_value(self) -> Decimal:
        """Valore a listino dei ricambi inclusi."""
        return sum(
            (
                entry.sparepart.price * entry.quantity
                for entry in self.bundle
                if entry.sparepart is not None
            ),
            Decimal("0"),
        )

    __table_args__ = (
        Index("ix_packages_name", "name"),
        CheckConstraint("price >= 0", name="ck_packages_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<Package(id={self.id}, name={self.name}, price={self.price})>"


class PackageSparepart(Base, UUIDMixin, TimestampMixin):
    """Riga di composizione di un pacchetto."""

    __tablename__ = "package_spareparts"

    package_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("packages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    sparepart_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("spareparts.id", ondelete="CASCADE"),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Unità di ricambio per unità di pacchetto",
    )

    package: Mapped["Package"] = relationship("Package", back_populates="bundle")

    sparepart: Mapped["Sparepart"] = relationship("Sparepart", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("package_id", "sparepart_id", name="uq_package_spareparts_pair"),
        CheckConstraint("quantity >= 1", name="ck_package_spareparts_quantity_positive"),
    )
