"""
Router per l'autenticazione
Progetto: Bengkel Manager (Gestionale Officina)

Endpoints per registrazione, login, refresh token e profilo utente.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bengkel.core.database import get_db
from bengkel.core.deps import CurrentUser, OptionalUser
from bengkel.schemas.token import TokenRefresh, TokenResponse
from bengkel.schemas.user import UserCreate, UserLogin, UserResponse
from bengkel.services.auth_service import auth_service

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post(
    "/register",
    name="auth_registra",
    summary="Registra un nuovo account",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: UserCreate,
    requester: OptionalUser,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Registra un nuovo account con profilo e ruolo.

    - Il primo account del sistema diventa owner
    - La registrazione come customer è libera
    - Account staff/owner richiedono un token owner
    """
    user = await auth_service.register(db, data, requester)
    await db.commit()
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    name="auth_login",
    summary="Login",
    response_model=TokenResponse,
)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Autentica con email e password e restituisce i token JWT."""
    return await auth_service.login(db, data)


@router.post(
    "/refresh",
    name="auth_refresh",
    summary="Aggiorna i token",
    response_model=TokenResponse,
)
async def refresh(
    data: TokenRefresh,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await auth_service.refresh(db, data.refresh_token)


@router.get(
    "/me",
    name="auth_me",
    summary="Account corrente",
    response_model=UserResponse,
)
async def me(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
