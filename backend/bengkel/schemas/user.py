"""
Schemas Pydantic per account, profili e ruoli
Progetto: Bengkel Manager (Gestionale Officina)
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bengkel.models.user import AppRole


class UserCreate(BaseModel):
    """
    Registrazione di un nuovo account con il relativo profilo.

    Attributes:
        email: Email di login (univoca)
        password: Password in chiaro (min 8 caratteri)
        name: Nome visualizzato
        phone: Telefono (opzionale)
        address: Indirizzo (opzionale)
        role: Ruolo richiesto (default: customer)
    """

    email: EmailStr = Field(..., description="Email univoca dell'account")
    password: str = Field(
        min_length=8,
        max_length=100,
        description="Password in chiaro (min 8, max 100 caratteri)",
    )
    name: str = Field(min_length=1, max_length=150, description="Nome visualizzato")
    phone: Optional[str] = Field(None, max_length=50, description="Telefono")
    address: Optional[str] = Field(None, description="Indirizzo")
    role: AppRole = Field(default=AppRole.CUSTOMER, description="Ruolo dell'account")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Il nome non può essere vuoto")
        return v


class UserLogin(BaseModel):
    """Credenziali di login."""

    email: EmailStr = Field(..., description="Email dell'account")
    password: str = Field(..., description="Password in chiaro")


class ProfileRead(BaseModel):
    """Anagrafica di un account."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None


class ProfileUpdate(BaseModel):
    """Aggiornamento parziale dell'anagrafica."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class UserResponse(BaseModel):
    """Dati account esposti dalle API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="UUID dell'account")
    email: str = Field(..., description="Email dell'account")
    role: AppRole = Field(..., description="Ruolo effettivo")
    is_active: bool = Field(..., description="Indica se l'account è attivo")
    created_at: datetime = Field(..., description="Data/ora di creazione")
    profile: Optional[ProfileRead] = None


class CustomerRead(ProfileRead):
    """Profilo con ruolo, per la gestione clienti."""

    role: AppRole = Field(default=AppRole.CUSTOMER, description="Ruolo (customer se assente)")
    created_at: Optional[datetime] = None


class CustomerUpdate(ProfileUpdate):
    """
    Aggiornamento cliente dalla schermata di gestione.

    Il ruolo, se presente, viene applicato solo quando chi modifica è owner.
    """

    role: Optional[AppRole] = None


class RoleUpdate(BaseModel):
    """Assegnazione ruolo."""

    role: AppRole = Field(..., description="Nuovo ruolo")


__all__ = [
    "UserCreate",
    "UserLogin",
    "ProfileRead",
    "ProfileUpdate",
    "UserResponse",
    "CustomerRead",
    "CustomerUpdate",
    "RoleUpdate",
]
