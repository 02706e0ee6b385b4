"""
Service Layer per l'entità Vehicle
Progetto: Bengkel Manager (Gestionale Officina)

Definisce la logica di business per la gestione dei veicoli e la
risoluzione dei proprietari (profili) con un'unica query.
"""

import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.exceptions import AuthorizationError, DuplicateError, NotFoundError
from bengkel.models import Profile, User, Vehicle
from bengkel.schemas.vehicle import (
    OwnerProfile,
    VehicleCreate,
    VehicleUpdate,
    VehicleWithOwner,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)


class VehicleService:
    """
    Service per la gestione delle operazioni CRUD sui veicoli.

    I clienti vedono e modificano solo i propri veicoli; owner e staff
    vedono tutto.
    """

    async def get_all(
        self,
        db: AsyncSession,
        current_user: User,
        search: Optional[str] = None,
    ) -> tuple[list[Vehicle], int]:
        """
        Recupera la lista dei veicoli visibili all'utente.

        Args:
            db: Sessione database
            current_user: Utente che effettua la richiesta
            search: Termine di ricerca opzionale (targa, marca, modello)

        Returns:
            Tuple di (lista veicoli, totale count)
        """
        filter_conditions = []

        if not current_user.is_staff_or_owner:
            filter_conditions.append(Vehicle.user_id == current_user.id)

        if search:
            search_term = f"%{search}%"
            filter_conditions.append(
                Vehicle.plate_number.ilike(search_term)
                | Vehicle.brand.ilike(search_term)
                | Vehicle.model.ilike(search_term)
            )

        query = select(Vehicle).where(*filter_conditions).order_by(Vehicle.created_at.desc())
        result = await db.execute(query)
        vehicles = list(result.scalars().all())

        count_query = select(func.count()).select_from(Vehicle).where(*filter_conditions)
        count_result = await db.execute(count_query)
        total = count_result.scalar() or 0

        logger.debug(f"Recuperati {len(vehicles)} veicoli su {total} totali")
        return vehicles, total

    async def get_by_id(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        current_user: Optional[User] = None,
    ) -> Vehicle:
        """
        Recupera un veicolo tramite ID.

        Un cliente che chiede un veicolo altrui riceve NotFoundError.

        Raises:
            NotFoundError: Se il veicolo non esiste o non è visibile
        """
        result = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
        vehicle = result.scalar_one_or_none()

        if vehicle is None or not self._can_access(vehicle, current_user):
            logger.warning(f"Veicolo non trovato: {vehicle_id}")
            raise NotFoundError(f"Veicolo con ID {vehicle_id} non trovato")

        return vehicle

    @staticmethod
    def _can_access(vehicle: Vehicle, current_user: Optional[User]) -> bool:
        if current_user is None or current_user.is_staff_or_owner:
            return True
        return vehicle.user_id == current_user.id

    async def resolve_owners(
        self,
        db: AsyncSession,
        vehicles: Iterable[Vehicle],
    ) -> list[VehicleWithOwner]:
        """
        Associa a ciascun veicolo il profilo del proprietario.

        Una sola query sui profili per tutti i veicoli, nessuna query se
        non ci sono proprietari. Un profilo mancante diventa owner=None.

        Args:
            db: Sessione database
            vehicles: Veicoli da annotare

        Returns:
            Lista di VehicleWithOwner nello stesso ordine
        """
        vehicles = list(vehicles)
        owner_ids = {v.user_id for v in vehicles if v.user_id is not None}

        profiles: dict[uuid.UUID, Profile] = {}
        if owner_ids:
            result = await db.execute(
                select(Profile).where(Profile.user_id.in_(owner_ids))
            )
            profiles = {p.user_id: p for p in result.scalars().all()}

        annotated = []
        for vehicle in vehicles:
            profile = profiles.get(vehicle.user_id)
            item = VehicleWithOwner.model_validate(vehicle)
            item.owner = OwnerProfile.model_validate(profile) if profile else None
            annotated.append(item)

        return annotated

    async def create(
        self,
        db: AsyncSession,
        vehicle_data: VehicleCreate,
        current_user: User,
    ) -> Vehicle:
        """
        Crea un nuovo veicolo.

        Raises:
            AuthorizationError: Se un cliente intesta il veicolo ad altri
            NotFoundError: Se l'account proprietario non esiste
            DuplicateError: Se la targa è già registrata
        """
        owner_id = vehicle_data.user_id or current_user.id

        if owner_id != current_user.id:
            if not current_user.is_staff_or_owner:
                raise AuthorizationError("Non puoi registrare veicoli per altri utenti")

            owner_result = await db.execute(select(User.id).where(User.id == owner_id))
            if owner_result.scalar_one_or_none() is None:
                logger.warning(f"Proprietario non trovato per creazione veicolo: {owner_id}")
                raise NotFoundError("Proprietario non trovato")

        vehicle = Vehicle(
            user_id=owner_id,
            **vehicle_data.model_dump(exclude={"user_id"}),
        )

        try:
            db.add(vehicle)
            await db.flush()
            await db.refresh(vehicle)
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Errore creazione veicolo - targa duplicata: {e.orig}")
            raise DuplicateError("Targa già registrata")

        logger.info(f"Creato nuovo veicolo: {vehicle.id} - {vehicle.plate_number}")
        return vehicle

    async def update(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        vehicle_data: VehicleUpdate,
        current_user: User,
    ) -> Vehicle:
        vehicle = await self.get_by_id(db, vehicle_id, current_user)

        for field, value in vehicle_data.model_dump(exclude_unset=True).items():
            setattr(vehicle, field, value)

        try:
            await db.flush()
            await db.refresh(vehicle)
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Errore aggiornamento veicolo - targa duplicata: {e.orig}")
            raise DuplicateError("Targa già registrata")

        logger.info(f"Aggiornato veicolo: {vehicle.id}")
        return vehicle

    async def delete(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        current_user: User,
    ) -> None:
        """Elimina un veicolo; le fatture restano senza veicolo associato."""
        vehicle = await self.get_by_id(db, vehicle_id, current_user)
        await db.delete(vehicle)
        await db.flush()

        logger.info(f"Eliminato veicolo: {vehicle_id}")


vehicle_service = VehicleService()
