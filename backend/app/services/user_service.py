"""
Service Layer per la gestione utenti (amministrazione)
Progetto: Invoice Manager (Gestionale Fatture)

Operazioni riservate agli amministratori: elenco, creazione,
modifica, reset password, attivazione/disattivazione ed eliminazione.
Un amministratore non può eliminare, disattivare o declassare se stesso.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.core.security import hash_password
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.services.auth_service import (
    check_password_length,
    ensure_unique_identity,
    flush_user,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)


class UserService:
    """Service per la gestione degli account da parte degli amministratori."""

    async def get_all(self, db: AsyncSession) -> list[User]:
        """Elenco di tutti gli utenti, dal più recente."""
        result = await db.execute(
            select(User).order_by(User.created_at.desc(), User.username.asc())
        )
        users = list(result.scalars().all())
        logger.info("Recuperati %s utenti", len(users))
        return users

    async def get_by_id(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        """
        Recupera un utente per ID.

        Raises:
            NotFoundError: Se l'utente non esiste
        """
        user = await db.get(User, user_id)
        if user is None:
            logger.warning("Utente non trovato: %s", user_id)
            raise NotFoundError(f"Utente con ID {user_id} non trovato")
        return user

    async def create(self, db: AsyncSession, data: UserCreate) -> User:
        """
        Crea un account con il ruolo indicato.

        Raises:
            ValidationError: Password troppo corta
            DuplicateError: Username o email già registrati
        """
        check_password_length(data.password)
        email = data.email.lower()
        await ensure_unique_identity(db, username=data.username, email=email)

        user = User(
            username=data.username,
            email=email,
            password_hash=hash_password(data.password),
            role=data.role.value,
            is_active=data.is_active,
        )
        db.add(user)
        await flush_user(db, user)

        logger.info("Utente creato: %s (%s)", user.username, user.role)
        return user

    async def update(
        self,
        db: AsyncSession,
        actor: User,
        user_id: uuid.UUID,
        data: UserUpdate,
    ) -> User:
        """
        Aggiorna username, email, ruolo o stato di un utente.

        Raises:
            NotFoundError: Se l'utente non esiste
            ValidationError: Se l'admin tenta di declassare o disattivare se stesso
            DuplicateError: Username o email già usati da un altro utente
        """
        user = await self.get_by_id(db, user_id)
        values = data.model_dump(exclude_unset=True, exclude_none=True)

        if user.id == actor.id:
            if values.get("role", UserRole.ADMIN) != UserRole.ADMIN:
                raise ValidationError("Non è possibile modificare il proprio ruolo")
            if values.get("is_active") is False:
                raise ValidationError("Non è possibile disattivare il proprio account")

        if "email" in values:
            values["email"] = values["email"].lower()
        await ensure_unique_identity(
            db,
            username=values.get("username"),
            email=values.get("email"),
            exclude_id=user.id,
        )

        if "role" in values:
            values["role"] = values["role"].value

        for field, value in values.items():
            setattr(user, field, value)

        await flush_user(db, user)
        logger.info("Utente aggiornato: %s", user.username)
        return user

    async def reset_password(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        new_password: str,
    ) -> User:
        """
        Imposta una nuova password senza richiedere quella attuale.

        Raises:
            NotFoundError: Se l'utente non esiste
            ValidationError: Password troppo corta
        """
        user = await self.get_by_id(db, user_id)
        check_password_length(new_password)

        user.password_hash = hash_password(new_password)
        await db.flush()

        logger.info("Password reimpostata per %s", user.username)
        return user

    async def set_active(
        self,
        db: AsyncSession,
        actor: User,
        user_id: uuid.UUID,
        is_active: bool,
    ) -> User:
        """
        Attiva o disattiva un account.

        Raises:
            NotFoundError: Se l'utente non esiste
            ValidationError: Se l'admin tenta di disattivare se stesso
        """
        user = await self.get_by_id(db, user_id)
        if user.id == actor.id and not is_active:
            raise ValidationError("Non è possibile disattivare il proprio account")

        user.is_active = is_active
        await db.flush()

        logger.info("Utente %s %s", user.username, "attivato" if is_active else "disattivato")
        return user

    async def delete(self, db: AsyncSession, actor: User, user_id: uuid.UUID) -> None:
        """
        Elimina un account.

        Raises:
            NotFoundError: Se l'utente non esiste
            ValidationError: Se l'admin tenta di eliminare se stesso
        """
        user = await self.get_by_id(db, user_id)
        if user.id == actor.id:
            raise ValidationError("Non è possibile eliminare il proprio account")

        await db.delete(user)
        await db.flush()
        logger.info("Utente eliminato: %s", user.username)


def get_user_service() -> UserService:
    """Factory per ottenere un'istanza dello UserService."""
    return UserService()


__all__ = ["UserService", "get_user_service"]
