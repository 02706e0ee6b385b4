"""
Router FastAPI per i pacchetti
Progetto: Bengkel Manager (Gestionale Officina)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser, StaffUser
from bengkel.schemas.catalog import (
    BundleEntryRead,
    PackageCreate,
    PackageRead,
    PackageUpdate,
)
from bengkel.services.catalog_service import package_catalog

router = APIRouter(
    prefix="/packages",
    tags=["Pacchetti"],
)


@router.get(
    "/",
    name="pacchetti_lista",
    summary="Lista pacchetti",
    description="Pacchetti ordinati per nome, con ricambi inclusi e valore del bundle.",
    response_model=list[PackageRead],
)
async def get_packages(
    current_user: CurrentUser,
    search: Optional[str] = Query(None, description="Filtro sul nome"),
    db: AsyncSession = Depends(get_db),
) -> list[PackageRead]:
    packages = await package_catalog.get_all(db, search=search)
    return [PackageRead.from_package(p) for p in packages]


@router.get(
    "/{package_id}",
    name="pacchetto_dettaglio",
    summary="Dettaglio pacchetto",
    response_model=PackageRead,
)
async def get_package(
    package_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> PackageRead:
    package = await package_catalog.get_by_id(db, package_id)
    return PackageRead.from_package(package)


@router.get(
    "/{package_id}/spareparts",
    name="pacchetto_ricambi",
    summary="Ricambi inclusi nel pacchetto",
    response_model=list[BundleEntryRead],
)
async def get_package_spareparts(
    package_id: uuid.UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> list[BundleEntryRead]:
    package = await package_catalog.get_by_id(db, package_id)
    return PackageRead.from_package(package).spareparts


@router.post(
    "/",
    name="pacchetto_crea",
    summary="Crea pacchetto",
    description="Crea il pacchetto e la sua composizione in un'unica transazione.",
    response_model=PackageRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_package(
    data: PackageCreate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> PackageRead:
    package = await package_catalog.create(db, data)
    await db.commit()
    return PackageRead.from_package(package)


@router.put(
    "/{package_id}",
    name="pacchetto_aggiorna",
    summary="Aggiorna pacchetto",
    description="Se spareparts è presente la composizione viene sostituita per intero.",
    response_model=PackageRead,
)
async def update_package(
    package_id: uuid.UUID,
    data: PackageUpdate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> PackageRead:
    package = await package_catalog.update(db, package_id, data)
    await db.commit()
    return PackageRead.from_package(package)


@router.delete(
    "/{package_id}",
    name="pacchetto_elimina",
    summary="Elimina pacchetto",
    description="Rifiutato con 409 se il pacchetto compare in una fattura.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_package(
    package_id: uuid.UUID,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await package_catalog.delete(db, package_id)
    await db.commit()
