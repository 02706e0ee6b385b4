"""
Router FastAPI per l'entità Workshop
Progetto: Bengkel Manager (Gestionale Officina)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser, StaffUser
from bengkel.schemas.workshop import WorkshopCreate, WorkshopRead, WorkshopUpdate
from bengkel.services.workshop_service import workshop_service

router = APIRouter(
    prefix="/workshops",
    tags=["Officine"],
)


@router.get(
    "/",
    name="officine_lista",
    summary="Lista officine",
    response_model=list[WorkshopRead],
)
async def get_workshops(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> list[WorkshopRead]:
    workshops = await workshop_service.get_all(db)
    return [WorkshopRead.model_validate(w) for w in workshops]


@router.get(
    "/{workshop_id}",
    name="officina_dettaglio",
    summary="Dettaglio officina",
    response_model=WorkshopRead,
)
async def get_workshop(
    workshop_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> WorkshopRead:
    workshop = await workshop_service.get_by_id(db, workshop_id)
    return WorkshopRead.model_validate(workshop)


@router.post(
    "/",
    name="officina_crea",
    summary="Crea officina",
    response_model=WorkshopRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_workshop(
    data: WorkshopCreate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> WorkshopRead:
    workshop = await workshop_service.create(db, data, user_id=current_user.id)
    await db.commit()
    return WorkshopRead.model_validate(workshop)


@router.put(
    "/{workshop_id}",
    name="officina_aggiorna",
    summary="Aggiorna officina",
    response_model=WorkshopRead,
)
async def update_workshop(
    workshop_id: uuid.UUID,
    data: WorkshopUpdate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> WorkshopRead:
    workshop = await workshop_service.update(db, workshop_id, data)
    await db.commit()
    return WorkshopRead.model_validate(workshop)


@router.delete(
    "/{workshop_id}",
    name="officina_elimina",
    summary="Elimina officina",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_workshop(
    workshop_id: uuid.UUID,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await workshop_service.delete(db, workshop_id)
    await db.commit()
