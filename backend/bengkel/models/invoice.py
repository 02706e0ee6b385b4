"""
Modelli SQLAlchemy per la Fatturazione
Progetto: Bengkel Manager (Gestionale Officina)

Contiene:
- ItemKind: tipo di articolo referenziato da una riga
- Invoice: testata fattura
- InvoiceLine: righe (esattamente uno tra pacchetto, servizio, ricambio)
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Tuple

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bengkel.models import Base
from bengkel.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from bengkel.models.catalog import Package, Service, Sparepart
    from bengkel.models.vehicle import Vehicle
    from bengkel.models.workshop import Workshop


class ItemKind(str, Enum):
    """Tipo di articolo di catalogo."""
    SERVICE = "service"
    SPAREPART = "sparepart"
    PACKAGE = "package"


# Colonna FK corrispondente a ciascun tipo di articolo
ITEM_KIND_COLUMNS = {
    ItemKind.PACKAGE: "package_id",
    ItemKind.SERVICE: "service_id",
    ItemKind.SPAREPART: "sparepart_id",
}


class Invoice(Base, UUIDMixin, TimestampMixin):
    """
    Testata fattura.

    Creata una volta e sostituita integralmente in modifica
    (testata + tutte le righe), mai aggiornata riga per riga.

    Attributes:
        invoice_number: Numero fattura (formato: INV/YYYYMMDD/XXXX)
        invoice_date: Data fattura
        vehicle_id: UUID del veicolo
        workshop_id: UUID dell'officina
        notes: Note
        discount: Sconto in valuta, salvato come inserito
        total_amount: Totale = max(0, somma righe - sconto)

    Relationships:
        vehicle: Veicolo
        workshop: Officina
        lines: Righe fattura
    """

    __tablename__ = "invoices"

    invoice_number: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        unique=True,
        doc="Numero fattura (formato: INV/YYYYMMDD/XXXX)",
    )

    invoice_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data fattura",
    )

    vehicle_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="SET NULL"),
        nullable=True,
    )

    workshop_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("workshops.id", ondelete="SET NULL"),
        nullable=True,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    discount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
        doc="Sconto in valuta (non percentuale)",
    )

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0"),
        doc="Totale fattura",
    )

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    vehicle: Mapped[Optional["Vehicle"]] = relationship("Vehicle", lazy="selectin")

    workshop: Mapped[Optional["Workshop"]] = relationship("Workshop", lazy="selectin")

    lines: Mapped[List["InvoiceLine"]] = relationship(
        "InvoiceLine",
        back_populates="invoice",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="InvoiceLine.position",
        doc="Righe della fattura",
    )

    @property
    def subtotal(self) -> Decimal:
        """Somma dei subtotali delle righe."""
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    __table_args__ = (
        Index("ix_invoices_invoice_date", "invoice_date"),
        Index("ix_invoices_vehicle_id", "vehicle_id"),
        CheckConstraint("total_amount >= 0", name="ck_invoices_total_positive"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.invoice_number}, total={self.total_amount})>"


class InvoiceLine(Base, UUIDMixin, TimestampMixin):
    """
    Riga fattura.

    Esattamente una tra package_id, service_id e sparepart_id è valorizzata.
    Il subtotal è congelato al momento dell'inserimento.
    """

    __tablename__ = "invoice_lines"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    package_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("packages.id", ondelete="RESTRICT"),
        nullable=True,
    )

    service_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("services.id", ondelete="RESTRICT"),
        nullable=True,
    )

    sparepart_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("spareparts.id", ondelete="RESTRICT"),
        nullable=True,
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        doc="Prezzo unitario × quantità al momento dell'inserimento",
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Ordine della riga nella fattura",
    )

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="lines")
    package: Mapped[Optional["Package"]] = relationship("Package", lazy="selectin")
    service: Mapped[Optional["Service"]] = relationship("Service", lazy="selectin")
    sparepart: Mapped[Optional["Sparepart"]] = relationship("Sparepart", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN package_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN service_id IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN sparepart_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_invoice_lines_single_item",
        ),
        CheckConstraint("quantity >= 1", name="ck_invoice_lines_quantity_positive"),
    )

    # ------------------------------------------------------------
    # Traduzione tre colonne nullable ↔ (ItemKind, item_id)
    # ------------------------------------------------------------
    @property
    def item_ref(self) -> Optional[Tuple[ItemKind, uuid.UUID]]:
        """Riferimento articolo come coppia (tipo, id), None se incoerente."""
        for kind, column in ITEM_KIND_COLUMNS.items():
            value = getattr(self, column)
            if value is not None:
                return kind, value
        return None

    @classmethod
    def columns_for(cls, kind: ItemKind, item_id: uuid.UUID) -> dict:
        """Valori delle tre colonne FK per un riferimento articolo."""
        values = {column: None for column in ITEM_KIND_COLUMNS.values()}
        values[ITEM_KIND_COLUMNS[ItemKind(kind)]] = item_id
        return values

    def __repr__(self) -> str:
        return f"<InvoiceLine(invoice_id={self.invoice_id}, ref={self.item_ref}, qty={self.quantity})>"
