"""
Router FastAPI per la gestione clienti
Progetto: Bengkel Manager (Gestionale Officina)

Le operazioni di scrittura gestiscono da sé la transazione.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import OwnerUser, StaffUser
from bengkel.schemas.user import CustomerRead, CustomerUpdate, RoleUpdate
from bengkel.services.customer_service import customer_service

router = APIRouter(
    prefix="/customers",
    tags=["Clienti"],
)


@router.get(
    "/",
    name="clienti_lista",
    summary="Lista clienti",
    description="Profili con ruolo; un account senza ruolo risulta customer.",
    response_model=list[CustomerRead],
)
async def get_customers(
    current_user: StaffUser,
    search: Optional[str] = Query(None, description="Filtro su nome o email"),
    db: AsyncSession = Depends(get_db),
) -> list[CustomerRead]:
    return await customer_service.get_all(db, search=search)


@router.put(
    "/{user_id}",
    name="cliente_aggiorna",
    summary="Aggiorna cliente",
    description="Aggiorna l'anagrafica; il ruolo può essere cambiato solo da un owner.",
    response_model=CustomerRead,
)
async def update_customer(
    user_id: uuid.UUID,
    data: CustomerUpdate,
    current_user: StaffUser,
    db: AsyncSession = Depends(get_db),
) -> CustomerRead:
    return await customer_service.update(db, user_id, data, current_user)


@router.put(
    "/{user_id}/role",
    name="cliente_ruolo",
    summary="Cambia ruolo",
    description="Aggiorna o inserisce la riga ruolo dell'account con un solo commit.",
    response_model=RoleUpdate,
)
async def set_customer_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    current_user: OwnerUser,
    db: AsyncSession = Depends(get_db),
) -> RoleUpdate:
    role = await customer_service.set_role(db, user_id, data.role, current_user)
    return RoleUpdate(role=role)


@router.delete(
    "/{user_id}",
    name="cliente_elimina",
    summary="Elimina cliente",
    description="Solo owner. Rimuove ruolo e profilo in un'unica transazione e disattiva l'account.",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_customer(
    user_id: uuid.UUID,
    current_user: OwnerUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await customer_service.delete(db, user_id, current_user)
