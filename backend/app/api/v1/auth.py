"""
Router per l'autenticazione
Progetto: Invoice Manager (Gestionale Fatture)

Endpoints per registrazione, login, profilo utente, cambio password e logout.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentUser, get_token
from app.schemas.token import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
)
from app.schemas.user import ProfileUpdate, RegisterRequest, UserResponse
from app.services.auth_service import AuthService, get_auth_service

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registra un nuovo utente",
)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Registra un nuovo utente con ruolo `user` e restituisce il token.

    Raises:
        ValidationError: Password troppo corta
        DuplicateError: Username o email già registrati
    """
    response = await service.register(db, data)
    await db.commit()
    return response


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Effettua il login",
)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """
    Effettua il login con username o email.

    Returns:
        AuthResponse con token di accesso e dati utente
    """
    return await service.login(db, data)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Ottieni il profilo utente corrente",
)
async def get_me(current_user: CurrentUser) -> UserResponse:
    """Restituisce i dati dell'utente corrente."""
    return UserResponse.model_validate(current_user)


@router.put(
    "/me",
    response_model=UserResponse,
    summary="Modifica il profilo utente corrente",
)
async def update_me(
    data: ProfileUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """
    Aggiorna username e/o email dell'utente corrente.

    Raises:
        DuplicateError: Username o email già usati
    """
    user = await service.update_profile(db, current_user, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="Cambia la password",
)
async def change_password(
    data: ChangePasswordRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Cambia la password dell'utente corrente.

    Raises:
        ValidationError: Password attuale errata o nuova password non valida
    """
    await service.change_password(db, current_user, data)
    await db.commit()
    return MessageResponse(message="Password modificata con successo")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Effettua il logout",
)
async def logout(
    token: Optional[str] = Depends(get_token),
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Revoca il token corrente.

    Risponde sempre con successo: il client scarta comunque il token.
    """
    await service.logout(db, token)
    return MessageResponse(message="Logout effettuato")


# Export
__all__ = ["router"]
