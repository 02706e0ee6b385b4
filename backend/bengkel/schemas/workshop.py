"""
Schemas Pydantic per l'entità Workshop
Progetto: Bengkel Manager (Gestionale Officina)
"""

import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkshopBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150, description="Nome dell'officina")
    address: Optional[str] = Field(None, description="Indirizzo")
    phone: Optional[str] = Field(None, max_length=50, description="Telefono")
    open_hours: Optional[str] = Field(None, max_length=100, description="Orari di apertura")


class WorkshopCreate(WorkshopBase):
    pass


class WorkshopUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    address: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)
    open_hours: Optional[str] = Field(None, max_length=100)


class WorkshopRead(WorkshopBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime
