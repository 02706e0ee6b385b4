"""
Schemas Pydantic per l'entità Vehicle
Progetto: Bengkel Manager (Gestionale Officina)

Definisce gli schemi di validazione e serializzazione per l'API.
"""

import datetime
import re
import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# -------------------------------------------------------------------
# Funzioni di normalizzazione e validazione
# -------------------------------------------------------------------

def normalize_plate(plate: Optional[str]) -> Optional[str]:
    """
    Normalizza la targa del veicolo.

    Converte in maiuscolo e comprime gli spazi multipli: le targhe
    indonesiane (es. "B 1234 XYZ") mantengono gli spazi tra i blocchi.

    Args:
        plate: Targa da normalizzare

    Returns:
        Targa normalizzata o None

    Raises:
        ValueError: Se il formato non è valido
    """
    if plate is None:
        return None

    normalized = " ".join(plate.strip().upper().split())

    if not re.match(r"^[A-Z0-9 ]{2,20}$", normalized):
        raise ValueError(
            "Targa non valida: deve contenere 2-20 caratteri alfanumerici"
        )

    return normalized


def validate_year(year: Optional[int]) -> Optional[int]:
    """
    Valida l'anno di immatricolazione (1900 ≤ anno ≤ anno corrente + 1).

    Raises:
        ValueError: Se l'anno non è valido
    """
    if year is None:
        return None

    max_year = datetime.datetime.now().year + 1
    if year < 1900:
        raise ValueError("L'anno di immatricolazione deve essere >= 1900")
    if year > max_year:
        raise ValueError(
            f"L'anno di immatricolazione non può essere superiore a {max_year}"
        )
    return year


# -------------------------------------------------------------------
# Schemas
# -------------------------------------------------------------------

class VehicleBase(BaseModel):
    plate_number: str = Field(..., description="Targa del veicolo")
    brand: Optional[str] = Field(None, max_length=100, description="Marca")
    model: Optional[str] = Field(None, max_length=100, description="Modello")
    year: Optional[int] = Field(None, description="Anno di immatricolazione")
    mileage: Optional[int] = Field(None, ge=0, description="Chilometraggio")

    @field_validator("plate_number")
    @classmethod
    def check_plate(cls, v: str) -> str:
        return normalize_plate(v)

    @field_validator("year")
    @classmethod
    def check_year(cls, v: Optional[int]) -> Optional[int]:
        return validate_year(v)


class VehicleCreate(VehicleBase):
    """
    Creazione veicolo.

    Se user_id è omesso il veicolo viene intestato all'utente corrente;
    solo owner e staff possono intestarlo ad un altro account.
    """

    user_id: Optional[uuid.UUID] = Field(None, description="UUID del proprietario")


class VehicleUpdate(BaseModel):
    plate_number: Optional[str] = None
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    year: Optional[int] = None
    mileage: Optional[int] = Field(None, ge=0)

    @field_validator("plate_number")
    @classmethod
    def check_plate(cls, v: Optional[str]) -> Optional[str]:
        return normalize_plate(v)

    @field_validator("year")
    @classmethod
    def check_year(cls, v: Optional[int]) -> Optional[int]:
        return validate_year(v)


class OwnerProfile(BaseModel):
    """Dati essenziali del proprietario."""

    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class VehicleRead(VehicleBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime


class VehicleWithOwner(VehicleRead):
    """Veicolo con il profilo del proprietario (None se non trovato)."""

    owner: Optional[OwnerProfile] = None


class VehicleList(BaseModel):
    items: List[VehicleWithOwner]
    total: int
