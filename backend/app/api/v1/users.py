"""
Router per la gestione utenti (solo amministratori)
Progetto: Invoice Manager (Gestionale Fatture)
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminUser
from app.schemas.token import MessageResponse
from app.schemas.user import (
    ResetPasswordRequest,
    UserActiveUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from app.services.user_service import UserService, get_user_service

router = APIRouter(
    prefix="/users",
    tags=["Utenti"],
)


@router.get("", response_model=list[UserResponse], summary="Lista utenti")
async def list_users(
    _: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> list[UserResponse]:
    users = await service.get_all(db)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse, summary="Dettaglio utente")
async def get_user(
    user_id: uuid.UUID,
    _: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.get_by_id(db, user_id)
    return UserResponse.model_validate(user)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crea utente",
)
async def create_user(
    data: UserCreate,
    _: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """
    Crea un account con ruolo e stato indicati.

    Raises:
        ValidationError: Password troppo corta
        DuplicateError: Username o email già registrati
    """
    user = await service.create(db, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse, summary="Aggiorna utente")
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.update(db, admin, user_id, data)
    await db.commit()
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}/reset-password",
    response_model=MessageResponse,
    summary="Reimposta la password di un utente",
)
async def reset_password(
    user_id: uuid.UUID,
    data: ResetPasswordRequest,
    _: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    user = await service.reset_password(db, user_id, data.new_password)
    await db.commit()
    return MessageResponse(message=f"Password reimpostata per {user.username}")


@router.put(
    "/{user_id}/active",
    response_model=UserResponse,
    summary="Attiva o disattiva un utente",
)
async def set_user_active(
    user_id: uuid.UUID,
    data: UserActiveUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.set_active(db, admin, user_id, data.is_active)
    await db.commit()
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse, summary="Elimina utente")
async def delete_user(
    user_id: uuid.UUID,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
    service: UserService = Depends(get_user_service),
) -> MessageResponse:
    await service.delete(db, admin, user_id)
    await db.commit()
    return MessageResponse(message="Utente eliminato con successo")


__all__ = ["router"]
