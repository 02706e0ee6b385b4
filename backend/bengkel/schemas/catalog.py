"""
Schemas Pydantic per il Catalogo
Progetto: Bengkel Manager (Gestionale Officina)

Contiene:
- Schemas per Service (jasa)
- Schemas per Sparepart (ricambi)
- Schemas per Package (pacchetti) e composizione bundle
"""

import datetime
import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# -------------------------------------------------------------------
# Service
# -------------------------------------------------------------------

class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150, description="Nome del servizio")
    description: Optional[str] = Field(None, description="Descrizione")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Prezzo unitario")


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


class ServiceRead(ServiceBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime


# -------------------------------------------------------------------
# Sparepart
# -------------------------------------------------------------------

class SparepartBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150, description="Nome del ricambio")
    brand: Optional[str] = Field(None, max_length=100, description="Marca")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Prezzo unitario")
    stock: int = Field(default=0, ge=0, description="Giacenza a magazzino")


class SparepartCreate(SparepartBase):
    pass


class SparepartUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    brand: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)


class SparepartRead(SparepartBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime


# -------------------------------------------------------------------
# Package
# -------------------------------------------------------------------

class BundleEntry(BaseModel):
    """Ricambio incluso in un pacchetto, come inviato dal client."""

    sparepart_id: uuid.UUID = Field(..., description="UUID del ricambio")
    quantity: int = Field(default=1, ge=1, description="Unità per pacchetto")


def check_unique_spareparts(entries: List[BundleEntry]) -> List[BundleEntry]:
    """Verifica che ogni ricambio compaia una sola volta nel pacchetto."""
    seen = set()
    for entry in entries:
        if entry.sparepart_id in seen:
            raise ValueError(f"Ricambio {entry.sparepart_id} ripetuto nel pacchetto")
        seen.add(entry.sparepart_id)
    return entries


class BundleEntryRead(BaseModel):
    """Ricambio incluso, con nome e prezzo correnti."""

    model_config = ConfigDict(from_attributes=True)

    sparepart_id: uuid.UUID
    quantity: int
    name: Optional[str] = None
    price: Optional[Decimal] = None


class PackageBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150, description="Nome del pacchetto")
    description: Optional[str] = Field(None, description="Descrizione")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Prezzo del pacchetto")
    duration_minutes: Optional[int] = Field(None, ge=0, description="Durata stimata (minuti)")


class PackageCreate(PackageBase):
    spareparts: List[BundleEntry] = Field(
        default_factory=list,
        description="Ricambi inclusi nel pacchetto",
    )

    @field_validator("spareparts")
    @classmethod
    def unique_spareparts(cls, v: List[BundleEntry]) -> List[BundleEntry]:
        return check_unique_spareparts(v)


class PackageUpdate(BaseModel):
    """
    Aggiornamento pacchetto.

    Se spareparts è presente sostituisce integralmente la composizione,
    se è None la composizione resta invariata.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    duration_minutes: Optional[int] = Field(None, ge=0)
    spareparts: Optional[List[BundleEntry]] = None

    @field_validator("spareparts")
    @classmethod
    def unique_spareparts(
        cls, v: Optional[List[BundleEntry]]
    ) -> Optional[List[BundleEntry]]:
        return v if v is None else check_unique_spareparts(v)


class PackageRead(PackageBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    spareparts: List[BundleEntryRead] = Field(default_factory=list)
    bundle_value: Decimal = Field(
        default=Decimal("0"),
        description="Valore a listino dei ricambi inclusi",
    )
    created_at: datetime.datetime
    updated_at: datetime.datetime

    @classmethod
    def from_package(cls, package) -> "PackageRead":
        """Costruisce la risposta da un Package con bundle caricato."""
        entries = [
            BundleEntryRead(
                sparepart_id=entry.sparepart_id,
                quantity=entry.quantity,
                name=entry.sparepart.name if entry.sparepart else None,
                price=entry.sparepart.price if entry.sparepart else None,
            )
            for entry in package.bundle
        ]
        return cls(
            id=package.id,
            name=package.name,
            description=package.description,
            price=package.price,
            duration_minutes=package.duration_minutes,
            spareparts=entries,
            bundle_value=package.bundle_value,
            created_at=package.created_at,
            updated_at=package.updated_at,
        )
