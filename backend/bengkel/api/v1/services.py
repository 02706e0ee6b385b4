"""
Router FastAPI per i servizi a listino (jasa)
Progetto: Bengkel Manager (Gestionale Officina)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser, StaffUser
from bengkel.schemas.catalog import ServiceCreate, ServiceRead, ServiceUpdate
from bengkel.services.catalog_service import service_catalog

router = APIRouter(
    prefix="/services",
    tags=["Servizi"],
)


@router.get(
    "/",
    name="servizi_lista",
    summary="Lista servizi",
    description="Servizi a listino ordinati per nome.",
    response_model=list[ServiceRead],
)
async def get_services(
    current_user: CurrentUser,
    search: Optional[str] = Query(None, description="Filtro sul nome"),
    db: AsyncSession = Depends(get_db),
) -> list[ServiceRead]:
    services = await service_catalog.get_all(db, search=search)
    return [ServiceRead.model_validate(s) for s in services]


@router.get(
    "/{service_id}",
    name="servizio_dettaglio",
    summary="Dettaglio servizio",
    response_model=ServiceRead,
)
async def get_service(
    service_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ServiceRead:
    service = await service_catalog.get_by_id(db, service_id)
    return ServiceRead.model_validate(service)


@router.post(
    "/",
    name="servizio_crea",
    summary="Crea servizio",
    response_model=ServiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_service(
    data: ServiceCreate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> ServiceRead:
    service = await service_catalog.create(db, data)
    await db.commit()
    return ServiceRead.model_validate(service)


@router.put(
    "/{service_id}",
    name="servizio_aggiorna",
    summary="Aggiorna servizio",
    response_model=ServiceRead,
)
async def update_service(
    service_id: uuid.UUID,
    data: ServiceUpdate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> ServiceRead:
    service = await service_catalog.update(db, service_id, data)
    await db.commit()
    return ServiceRead.model_validate(service)


@router.delete(
    "/{service_id}",
    name="servizio_elimina",
    summary="Elimina servizio",
    description="Rifiutato con 409 se il servizio compare in una fattura.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_service(
    service_id: uuid.UUID,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await service_catalog.delete(db, service_id)
    await db.commit()
