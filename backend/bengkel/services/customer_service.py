"""
Service Layer per la gestione clienti
Progetto: Bengkel Manager (Gestionale Officina)

Profili e ruoli. Il ruolo è una riga separata per account: viene
aggiornata sul posto o inserita (upsert per user_id), mai cancellata
e ricreata, così l'account non resta mai senza ruolo.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.exceptions import (
    AuthorizationError,
    BusinessValidationError,
    ConflictError,
    NotFoundError,
)
from bengkel.models import AppRole, Profile, User, UserRole
from bengkel.schemas.user import CustomerRead, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    """Operazioni su profili e ruoli degli account."""

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
    ) -> list[CustomerRead]:
        """
        Elenco profili con il relativo ruolo, ordinati per nome.

        Un account senza riga ruolo viene mostrato come customer.
        """
        query = (
            select(Profile, UserRole.role)
            .outerjoin(UserRole, UserRole.user_id == Profile.user_id)
            .order_by(Profile.name.asc())
        )
        if search:
            search_term = f"%{search}%"
            query = query.where(
                Profile.name.ilike(search_term) | Profile.email.ilike(search_term)
            )

        result = await db.execute(query)
        customers = []
        for profile, role in result.all():
            item = CustomerRead.model_validate(profile)
            item.role = AppRole(role) if role else AppRole.CUSTOMER
            customers.append(item)

        logger.debug(f"Recuperati {len(customers)} clienti")
        return customers

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> Profile:
        """
        Recupera il profilo di un account.

        Raises:
            NotFoundError: Se il profilo non esiste
        """
        result = await db.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()

        if profile is None:
            logger.warning(f"Profilo non trovato: {user_id}")
            raise NotFoundError(f"Cliente con ID {user_id} non trovato")

        return profile

    async def get_role(self, db: AsyncSession, user_id: uuid.UUID) -> AppRole:
        result = await db.execute(select(UserRole.role).where(UserRole.user_id == user_id))
        role = result.scalar_one_or_none()
        return AppRole(role) if role else AppRole.CUSTOMER

    async def _upsert_role(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        role: AppRole,
    ) -> UserRole:
        """Aggiorna la riga ruolo esistente o ne inserisce una nuova (senza commit)."""
        result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
        assignment = result.scalar_one_or_none()

        if assignment is None:
            assignment = UserRole(user_id=user_id, role=AppRole(role).value)
            db.add(assignment)
        else:
            assignment.role = AppRole(role).value

        return assignment

    @staticmethod
    def _require_owner(current_user: User) -> None:
        if current_user.role != AppRole.OWNER.value:
            raise AuthorizationError("Operazione riservata agli owner")

    async def set_role(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        role: AppRole,
        current_user: User,
    ) -> AppRole:
        """
        Assegna un ruolo a un account (solo owner).

        Args:
            db: Sessione database
            user_id: UUID dell'account
            role: Nuovo ruolo
            current_user: Utente che effettua la modifica

        Returns:
            Il ruolo assegnato

        Raises:
            AuthorizationError: Se chi modifica non è owner
            NotFoundError: Se l'account non esiste
            ConflictError: Se un'assegnazione concorrente viola il vincolo unique
        """
        self._require_owner(current_user)

        user_result = await db.execute(select(User.id).where(User.id == user_id))
        if user_result.scalar_one_or_none() is None:
            logger.warning(f"Account non trovato per assegnazione ruolo: {user_id}")
            raise NotFoundError(f"Cliente con ID {user_id} non trovato")

        await self._upsert_role(db, user_id, role)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Conflitto assegnazione ruolo {user_id}: {e.orig}")
            raise ConflictError("Ruolo modificato contemporaneamente, riprovare")

        logger.info(f"Ruolo di {user_id} impostato a {AppRole(role).value} da {current_user.id}")
        return AppRole(role)

    async def update(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        data: CustomerUpdate,
        current_user: User,
    ) -> CustomerRead:
        """
        Aggiorna anagrafica ed eventualmente ruolo, in un'unica transazione.

        Raises:
            NotFoundError: Se il profilo non esiste
            AuthorizationError: Se viene cambiato il ruolo senza essere owner
        """
        profile = await self.get_profile(db, user_id)

        if data.role is not None:
            self._require_owner(current_user)

        for field, value in data.model_dump(exclude_unset=True, exclude={"role"}).items():
            setattr(profile, field, value)

        if data.role is not None:
            await self._upsert_role(db, user_id, data.role)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Errore aggiornamento cliente {user_id}: {e.orig}")
            raise ConflictError("Errore durante l'aggiornamento del cliente")

        await db.refresh(profile)
        item = CustomerRead.model_validate(profile)
        item.role = data.role if data.role is not None else await self.get_role(db, user_id)

        logger.info(f"Aggiornato cliente: {user_id}")
        return item

    async def delete(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        current_user: User,
    ) -> None:
        """
        Elimina un cliente: riga ruolo e profilo in un'unica transazione.

        L'account viene disattivato e non può più autenticarsi.

        Raises:
            AuthorizationError: Se chi elimina non è owner
            BusinessValidationError: Se si tenta di eliminare se stessi
            NotFoundError: Se il profilo non esiste
        """
        self._require_owner(current_user)

        if user_id == current_user.id:
            raise BusinessValidationError("Non puoi eliminare il tuo stesso account")

        profile = await self.get_profile(db, user_id)

        role_result = await db.execute(select(UserRole).where(UserRole.user_id == user_id))
        assignment = role_result.scalar_one_or_none()

        user_result = await db.execute(select(User).where(User.id == user_id))
        user = user_result.scalar_one_or_none()

        try:
            if assignment is not None:
                await db.delete(assignment)
            await db.delete(profile)
            if user is not None:
                user.is_active = False
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Errore eliminazione cliente {user_id}: {e.orig}")
            raise ConflictError("Impossibile eliminare il cliente")

        logger.info(f"Eliminato cliente: {user_id}")


customer_service = CustomerService()
