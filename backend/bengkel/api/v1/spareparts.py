"""
Router FastAPI per i ricambi
Progetto: Bengkel Manager (Gestionale Officina)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser, StaffUser
from bengkel.schemas.catalog import SparepartCreate, SparepartRead, SparepartUpdate
from bengkel.services.catalog_service import sparepart_catalog

router = APIRouter(
    prefix="/spareparts",
    tags=["Ricambi"],
)


@router.get(
    "/",
    name="ricambi_lista",
    summary="Lista ricambi",
    description="Ricambi a listino ordinati per nome.",
    response_model=list[SparepartRead],
)
async def get_spareparts(
    current_user: CurrentUser,
    search: Optional[str] = Query(None, description="Filtro sul nome"),
    db: AsyncSession = Depends(get_db),
) -> list[SparepartRead]:
    spareparts = await sparepart_catalog.get_all(db, search=search)
    return [SparepartRead.model_validate(s) for s in spareparts]


@router.get(
    "/{sparepart_id}",
    name="ricambio_dettaglio",
    summary="Dettaglio ricambio",
    response_model=SparepartRead,
)
async def get_sparepart(
    sparepart_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> SparepartRead:
    sparepart = await sparepart_catalog.get_by_id(db, sparepart_id)
    return SparepartRead.model_validate(sparepart)


@router.post(
    "/",
    name="ricambio_crea",
    summary="Crea ricambio",
    response_model=SparepartRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_sparepart(
    data: SparepartCreate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> SparepartRead:
    sparepart = await sparepart_catalog.create(db, data)
    await db.commit()
    return SparepartRead.model_validate(sparepart)


@router.put(
    "/{sparepart_id}",
    name="ricambio_aggiorna",
    summary="Aggiorna ricambio",
    response_model=SparepartRead,
)
async def update_sparepart(
    sparepart_id: uuid.UUID,
    data: SparepartUpdate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> SparepartRead:
    sparepart = await sparepart_catalog.update(db, sparepart_id, data)
    await db.commit()
    return SparepartRead.model_validate(sparepart)


@router.delete(
    "/{sparepart_id}",
    name="ricambio_elimina",
    summary="Elimina ricambio",
    description="Rifiutato con 409 se il ricambio compare in una fattura.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_sparepart(
    sparepart_id: uuid.UUID,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await sparepart_catalog.delete(db, sparepart_id)
    await db.commit()
