"""
Password e token JWT
Progetto: Bengkel Manager (Gestionale Officina)

I token portano l'id account ("sub"), il ruolo al momento
dell'emissione e il tipo ("access" o "refresh"). Il ruolo nel token è
solo informativo: le autorizzazioni rileggono il ruolo dal database.
"""

from datetime import datetime, timedelta, timezone
from typing import Literal

from fastapi import HTTPException, status
from jose import JWTError, jwt
from passlib.context import CryptContext

from bengkel.core.config import settings
from bengkel.schemas.token import TokenPayload

TokenType = Literal["access", "refresh"]

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def credentials_exception(detail: str) -> HTTPException:
    """401 con header WWW-Authenticate per i client OAuth2."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _encode(user_id: str, role: str, token_type: TokenType, lifetime: timedelta) -> str:
    claims = {
        "sub": user_id,
        "role": role,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, role: str) -> str:
    return _encode(user_id, role, "access", timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(user_id: str, role: str) -> str:
    return _encode(user_id, role, "refresh", timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str) -> TokenPayload:
    """
    Verifica firma e scadenza di un token.

    Raises:
        HTTPException 401: Token non valido, scaduto o senza "sub"
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise credentials_exception(f"Token invalido o scaduto: {e}")

    if not claims.get("sub"):
        raise credentials_exception("Token invalido: subject mancante")

    return TokenPayload(
        sub=claims["sub"],
        role=claims.get("role") or "customer",
        exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        type=claims.get("type", "access"),
    )


__all__ = [
    "hash_password",
    "verify_password",
    "credentials_exception",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
]
