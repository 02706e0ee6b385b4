"""
Dependency di autenticazione e ruoli
Progetto: Bengkel Manager (Gestionale Officina)

Uso nei router:
    current_user: CurrentUser      qualsiasi account attivo
    current_user: StaffUser        owner o staff
    current_user: OwnerUser        solo owner
    requester: OptionalUser        token facoltativo (registrazione)
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.security import credentials_exception, decode_token
from bengkel.models.user import AppRole, User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def _load_user(db: AsyncSession, token: str) -> User:
    """Account attivo corrispondente a un access token."""
    token_data = decode_token(token)
    if token_data.type != "access":
        raise credentials_exception("Token di refresh non valido per questa operazione")

    try:
        user_id = UUID(token_data.sub)
    except ValueError:
        raise credentials_exception("ID utente invalido nel token")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception("Utente non trovato")
    if not user.is_active:
        raise credentials_exception("Utente disattivato")
    return user


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if not token:
        raise credentials_exception("Token di autenticazione non fornito")
    return await _load_user(db, token)


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """None senza token; con un token non valido risponde comunque 401."""
    if not token:
        return None
    return await _load_user(db, token)


def require_role(*allowed_roles: AppRole):
    """
    Dependency che ammette solo i ruoli indicati (403 altrimenti).

    Il ruolo è quello attuale dell'account (riga user_roles), non quello
    scritto nel token.
    """
    allowed = {AppRole(role).value for role in allowed_roles}

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)]
    ) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Accesso negato. Ruolo richiesto: {', '.join(sorted(allowed))}",
            )
        return current_user

    return role_checker


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]
OwnerUser = Annotated[User, Depends(require_role(AppRole.OWNER))]
StaffUser = Annotated[User, Depends(require_role(AppRole.OWNER, AppRole.STAFF))]
