"""
Schemas Pydantic per la Fatturazione
Progetto: Bengkel Manager (Gestionale Officina)

Contiene:
- DraftLine / InvoiceDraft: bozza fattura (value object, non persistita)
- Richieste e risposte per composizione righe e totali
- Schemas di lettura per lista, dettaglio e stampa
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bengkel.models.invoice import ItemKind
from bengkel.schemas.vehicle import OwnerProfile


# -------------------------------------------------------------------
# Bozza
# -------------------------------------------------------------------

class DraftLine(BaseModel):
    """
    Riga di bozza.

    key identifica la riga solo all'interno della bozza; bundled_by
    indica il pacchetto che ha generato la riga e non viene mai salvato.
    """

    key: str = Field(
        default_factory=lambda: uuid.uuid4().hex,
        description="Chiave locale della riga nella bozza",
    )
    item_kind: ItemKind = Field(..., description="Tipo articolo: service, sparepart, package")
    item_id: uuid.UUID = Field(..., description="UUID dell'articolo")
    name: Optional[str] = Field(None, description="Nome visualizzato")
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, description="Prezzo unitario")
    quantity: int = Field(default=1, ge=1, description="Quantità")
    subtotal: Decimal = Field(..., ge=0, description="Prezzo unitario × quantità")
    bundled_by: Optional[uuid.UUID] = Field(
        None,
        description="UUID del pacchetto che ha aggiunto la riga",
    )


class AddItemRequest(BaseModel):
    """
    Aggiunta di un articolo alla bozza.

    quantity accetta qualsiasi valore: se non numerico o ≤ 0 vale 1.
    """

    item_kind: ItemKind
    item_id: uuid.UUID
    quantity: Any = Field(default=1, description="Quantità (default 1)")
    lines: List[DraftLine] = Field(
        default_factory=list,
        description="Righe già presenti nella bozza",
    )


class AddItemResponse(BaseModel):
    lines: List[DraftLine] = Field(..., description="Righe della bozza aggiornate")
    added: List[DraftLine] = Field(..., description="Righe appena aggiunte")
    warnings: List[str] = Field(default_factory=list)


class RemoveLineRequest(BaseModel):
    lines: List[DraftLine]
    key: str = Field(..., description="Chiave della riga da rimuovere")


class TotalsRequest(BaseModel):
    lines: List[DraftLine] = Field(default_factory=list)
    discount: Decimal = Field(default=Decimal("0"), ge=0, description="Sconto in valuta")


class InvoiceTotals(BaseModel):
    """Totali della bozza con le stringhe formattate per la valuta."""

    subtotal: Decimal
    discount: Decimal
    total: Decimal
    subtotal_display: str
    discount_display: str
    total_display: str


class InvoiceDraft(BaseModel):
    """Bozza completa inviata in creazione e in modifica."""

    workshop_id: Optional[uuid.UUID] = Field(None, description="UUID dell'officina")
    vehicle_id: Optional[uuid.UUID] = Field(None, description="UUID del veicolo")
    invoice_date: date = Field(default_factory=date.today, description="Data fattura")
    discount: Decimal = Field(default=Decimal("0"), ge=0, description="Sconto in valuta")
    notes: Optional[str] = Field(None, description="Note")
    lines: List[DraftLine] = Field(default_factory=list)


class InvoiceDraftLoaded(InvoiceDraft):
    """Bozza ricostruita da una fattura salvata, per la modifica."""

    id: uuid.UUID
    invoice_number: str


# -------------------------------------------------------------------
# Lettura
# -------------------------------------------------------------------

class WorkshopInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None


class VehicleInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    plate_number: str
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    mileage: Optional[int] = None


class InvoiceLineRead(BaseModel):
    """Riga salvata, con nome visualizzato risolto dal catalogo."""

    id: uuid.UUID
    item_kind: Optional[ItemKind] = None
    item_id: Optional[uuid.UUID] = None
    display_name: str
    quantity: int
    subtotal: Decimal


class InvoiceSummary(BaseModel):
    """Fattura in elenco."""

    id: uuid.UUID
    invoice_number: str
    invoice_date: date
    vehicle: Optional[VehicleInfo] = None
    workshop: Optional[WorkshopInfo] = None
    discount: Decimal
    total_amount: Decimal
    created_at: datetime


class InvoiceList(BaseModel):
    items: List[InvoiceSummary]
    total: int


class InvoiceDetail(InvoiceSummary):
    """Dettaglio fattura per visualizzazione e stampa."""

    notes: Optional[str] = None
    owner: Optional[OwnerProfile] = None
    lines: List[InvoiceLineRead] = Field(default_factory=list)
    subtotal: Decimal
