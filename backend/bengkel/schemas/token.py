"""
Schemas Pydantic per l'autenticazione JWT
Progetto: Bengkel Manager (Gestionale Officina)
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Coppia di token restituita da login e refresh."""

    access_token: str = Field(..., description="Token di accesso JWT")
    refresh_token: str = Field(..., description="Token di refresh JWT")
    token_type: str = Field(default="bearer", description="Tipo di token")


class TokenRefresh(BaseModel):
    """Richiesta di refresh token."""

    refresh_token: str = Field(..., description="Token di refresh JWT")


class TokenPayload(BaseModel):
    """
    Payload contenuto nei token JWT.

    Attributes:
        sub: ID dell'account come stringa
        role: Ruolo al momento dell'emissione
        exp: Data/ora di scadenza
        type: "access" o "refresh"
    """

    sub: str = Field(..., description="ID account")
    role: str = Field(..., description="Ruolo dell'account")
    exp: datetime = Field(..., description="Data/ora di scadenza")
    type: str = Field(..., description="Tipo di token (access/refresh)")


__all__ = [
    "TokenResponse",
    "TokenRefresh",
    "TokenPayload",
]
