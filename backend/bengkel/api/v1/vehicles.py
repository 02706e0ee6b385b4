"""
Router FastAPI per l'entità Vehicle
Progetto: Bengkel Manager (Gestionale Officina)

Definisce gli endpoint API per la gestione dei veicoli. I clienti
vedono solo i propri veicoli.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser
from bengkel.schemas.vehicle import (
    VehicleCreate,
    VehicleList,
    VehicleUpdate,
    VehicleWithOwner,
)
from bengkel.services.vehicle_service import vehicle_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/vehicles",
    tags=["Veicoli"],
)


@router.get(
    "/",
    name="veicoli_lista",
    summary="Lista veicoli",
    description="Veicoli visibili all'utente, ciascuno con il profilo del proprietario.",
    response_model=VehicleList,
    status_code=status.HTTP_200_OK,
)
async def get_vehicles(
    current_user: CurrentUser,
    search: Optional[str] = Query(None, description="Termine di ricerca su targa, marca, modello"),
    db: AsyncSession = Depends(get_db),
) -> VehicleList:
    """
    Recupera la lista dei veicoli.

    Il proprietario di ogni veicolo viene risolto con un'unica query
    sui profili; se il profilo non esiste owner è null.
    """
    vehicles, total = await vehicle_service.get_all(
        db=db,
        current_user=current_user,
        search=search,
    )
    items = await vehicle_service.resolve_owners(db, vehicles)
    return VehicleList(items=items, total=total)


@router.get(
    "/{vehicle_id}",
    name="veicolo_dettaglio",
    summary="Dettaglio veicolo",
    response_model=VehicleWithOwner,
)
async def get_vehicle(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> VehicleWithOwner:
    vehicle = await vehicle_service.get_by_id(db, vehicle_id, current_user)
    items = await vehicle_service.resolve_owners(db, [vehicle])
    return items[0]


@router.post(
    "/",
    name="veicolo_crea",
    summary="Crea veicolo",
    description="Crea un veicolo; senza user_id viene intestato all'utente corrente.",
    response_model=VehicleWithOwner,
    status_code=status.HTTP_201_CREATED,
)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> VehicleWithOwner:
    """
    Raises:
        403: Se un cliente intesta il veicolo ad altri
        404: Se il proprietario non esiste
        409: Se la targa è già registrata
    """
    vehicle = await vehicle_service.create(db, vehicle_data, current_user)
    await db.commit()
    items = await vehicle_service.resolve_owners(db, [vehicle])
    return items[0]


@router.put(
    "/{vehicle_id}",
    name="veicolo_aggiorna",
    summary="Aggiorna veicolo",
    response_model=VehicleWithOwner,
)
async def update_vehicle(
    vehicle_id: uuid.UUID,
    vehicle_data: VehicleUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> VehicleWithOwner:
    vehicle = await vehicle_service.update(db, vehicle_id, vehicle_data, current_user)
    await db.commit()
    items = await vehicle_service.resolve_owners(db, [vehicle])
    return items[0]


@router.delete(
    "/{vehicle_id}",
    name="veicolo_elimina",
    summary="Elimina veicolo",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_vehicle(
    vehicle_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await vehicle_service.delete(db, vehicle_id, current_user)
    await db.commit()
