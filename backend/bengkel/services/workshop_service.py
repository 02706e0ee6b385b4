"""
Service Layer per l'entità Workshop
Progetto: Bengkel Manager (Gestionale Officina)
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.exceptions import ConflictError, NotFoundError
from bengkel.models import Workshop
from bengkel.schemas.workshop import WorkshopCreate, WorkshopUpdate

logger = logging.getLogger(__name__)


class WorkshopService:
    """CRUD sulle officine."""

    async def get_all(self, db: AsyncSession) -> list[Workshop]:
        """Officine ordinate per data di creazione (più recenti prima)."""
        result = await db.execute(
            select(Workshop).order_by(Workshop.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_by_id(self, db: AsyncSession, workshop_id: uuid.UUID) -> Workshop:
        """
        Recupera un'officina tramite ID.

        Raises:
            NotFoundError: Se l'officina non esiste
        """
        result = await db.execute(select(Workshop).where(Workshop.id == workshop_id))
        workshop = result.scalar_one_or_none()

        if workshop is None:
            logger.warning(f"Officina non trovata: {workshop_id}")
            raise NotFoundError(f"Officina con ID {workshop_id} non trovata")

        return workshop

    async def create(
        self,
        db: AsyncSession,
        data: WorkshopCreate,
        user_id: uuid.UUID,
    ) -> Workshop:
        """Crea un'officina intestata all'utente che la registra."""
        workshop = Workshop(user_id=user_id, **data.model_dump())
        db.add(workshop)
        await db.flush()
        await db.refresh(workshop)

        logger.info(f"Creata officina: {workshop.id} - {workshop.name}")
        return workshop

    async def update(
        self,
        db: AsyncSession,
        workshop_id: uuid.UUID,
        data: WorkshopUpdate,
    ) -> Workshop:
        workshop = await self.get_by_id(db, workshop_id)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(workshop, field, value)

        await db.flush()
        await db.refresh(workshop)

        logger.info(f"Aggiornata officina: {workshop.id}")
        return workshop

    async def delete(self, db: AsyncSession, workshop_id: uuid.UUID) -> None:
        """
        Elimina un'officina.

        Le fatture collegate restano, con officina non più valorizzata.
        """
        workshop = await self.get_by_id(db, workshop_id)

        try:
            await db.delete(workshop)
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Errore eliminazione officina {workshop_id}: {e.orig}")
            raise ConflictError("Impossibile eliminare l'officina")

        logger.info(f"Eliminata officina: {workshop_id}")


workshop_service = WorkshopService()
