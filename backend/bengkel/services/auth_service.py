"""
Servizio per l'autenticazione
Progetto: Bengkel Manager (Gestionale Officina)

Business logic per registrazione, login e refresh token.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.exceptions import AuthorizationError, DuplicateError, NotFoundError
from bengkel.core.security import (
    create_access_token,
    create_refresh_token,
    credentials_exception,
    decode_token,
    hash_password,
    verify_password,
)
from bengkel.models.user import AppRole, Profile, User, UserRole
from bengkel.schemas.token import TokenResponse
from bengkel.schemas.user import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class AuthService:
    """Servizio per la gestione dell'autenticazione."""

    async def count_users(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count(User.id)))
        return result.scalar() or 0

    async def register(
        self,
        db: AsyncSession,
        data: UserCreate,
        requester: Optional[User] = None,
    ) -> User:
        """
        Registra un nuovo account con profilo e ruolo.

        Il primo account del sistema diventa owner. In seguito chiunque
        può registrarsi come customer, mentre per creare account staff
        od owner serve un owner autenticato.

        Args:
            db: Sessione database
            data: Dati per la creazione dell'account
            requester: Utente autenticato che effettua la registrazione

        Returns:
            L'account creato

        Raises:
            DuplicateError: Se l'email è già registrata
            AuthorizationError: Se il ruolo richiesto non è consentito
        """
        result = await db.execute(select(User).where(User.email == data.email))
        if result.scalar_one_or_none():
            raise DuplicateError(f"L'email {data.email} è già registrata")

        role = AppRole(data.role)
        if await self.count_users(db) == 0:
            role = AppRole.OWNER
        elif role != AppRole.CUSTOMER:
            if requester is None or requester.role != AppRole.OWNER.value:
                raise AuthorizationError(
                    "Solo un owner può registrare account staff o owner"
                )

        user = User(
            email=data.email,
            hashed_password=hash_password(data.password),
        )
        user.profile = Profile(
            name=data.name,
            email=data.email,
            phone=data.phone,
            address=data.address,
        )
        user.role_assignment = UserRole(role=role.value)

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Registrato account {user.id} ({role.value})")
        return user

    def _issue_tokens(self, user: User) -> TokenResponse:
        return TokenResponse(
            access_token=create_access_token(str(user.id), user.role),
            refresh_token=create_refresh_token(str(user.id), user.role),
            token_type="bearer",
        )

    async def login(self, db: AsyncSession, data: UserLogin) -> TokenResponse:
        """
        Autentica un utente e restituisce i token JWT.

        Raises:
            HTTPException 401: Se le credenziali sono invalide o l'account è disattivato
        """
        result = await db.execute(select(User).where(User.email == data.email))
        user = result.scalar_one_or_none()

        if not user or not verify_password(data.password, user.hashed_password):
            logger.warning(f"Login fallito per {data.email}")
            raise credentials_exception("Email o password non corretti")

        if not user.is_active:
            raise credentials_exception("Utente disattivato")

        return self._issue_tokens(user)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> TokenResponse:
        """
        Aggiorna i token JWT usando un refresh token.

        Raises:
            HTTPException 401: Se il refresh token è invalido
        """
        token_data = decode_token(refresh_token)

        if token_data.type != "refresh":
            raise credentials_exception("Token di accesso non valido per il refresh")

        try:
            user_id = UUID(token_data.sub)
        except ValueError:
            raise credentials_exception("ID utente invalido nel token")

        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()

        if not user:
            raise credentials_exception("Utente non trovato")
        if not user.is_active:
            raise credentials_exception("Utente disattivato")

        return self._issue_tokens(user)

    async def get_user_by_id(self, db: AsyncSession, user_id: UUID) -> User:
        """
        Raises:
            NotFoundError: Se l'utente non esiste
        """
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundError(f"Utente con ID {user_id} non trovato")

        return user


auth_service = AuthService()
