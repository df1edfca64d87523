"""
Servizio per l'autenticazione
Progetto: Invoice Manager (Gestionale Fatture)

Business logic per registrazione, login, validazione token,
cambio password, profilo e logout.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthError, DuplicateError, NotFoundError, ValidationError
from app.core.security import (
    create_access_token,
    decode_token,
    dummy_verify,
    hash_password,
    verify_password,
)
from app.models.user import RevokedToken, User, UserRole
from app.schemas.token import AuthResponse, ChangePasswordRequest, LoginRequest
from app.schemas.user import ProfileUpdate, RegisterRequest, UserResponse

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Stesso messaggio per utente sconosciuto e password errata
INVALID_CREDENTIALS = "Credenziali non valide"


def check_password_length(password: str) -> None:
    """
    Verifica la lunghezza minima della password.

    Raises:
        ValidationError: Se la password è più corta del minimo configurato
    """
    if len(password) < settings.password_min_length:
        raise ValidationError(
            f"La password deve contenere almeno {settings.password_min_length} caratteri"
        )


async def ensure_unique_identity(
    db: AsyncSession,
    username: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[UUID] = None,
) -> None:
    """
    Verifica che username ed email non siano già usati da un altro utente.

    Il confronto non distingue maiuscole e minuscole.

    Raises:
        DuplicateError: Se username o email sono già registrati
    """
    if username is not None:
        query = select(User.id).where(func.lower(User.username) == username.lower())
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise DuplicateError(f"Lo username '{username}' è già registrato")

    if email is not None:
        query = select(User.id).where(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise DuplicateError(f"L'email '{email}' è già registrata")


async def flush_user(db: AsyncSession, user: User) -> User:
    """
    Scrive l'utente sul database traducendo le violazioni di unicità.

    Raises:
        DuplicateError: Se l'indice univoco rifiuta username o email
    """
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Violazione di unicità sugli utenti: %s", e.orig)
        raise DuplicateError("Username o email già registrati")
    return user


class AuthService:
    """Servizio per la gestione dell'autenticazione."""

    def _auth_response(self, user: User, message: str) -> AuthResponse:
        token = create_access_token(str(user.id), user.role)
        return AuthResponse(
            message=message,
            token=token,
            user=UserResponse.model_validate(user),
        )

    async def register(self, db: AsyncSession, data: RegisterRequest) -> AuthResponse:
        """
        Registra un nuovo utente con ruolo `user` e lo autentica.

        Args:
            db: Sessione database
            data: Username, email e password

        Returns:
            AuthResponse con token e dati utente

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
            role=UserRole.USER.value,
            is_active=True,
        )
        db.add(user)
        await flush_user(db, user)

        logger.info("Nuovo utente registrato: %s", user.username)
        return self._auth_response(user, "Registrazione completata")

    async def login(self, db: AsyncSession, data: LoginRequest) -> AuthResponse:
        """
        Autentica un utente tramite username o email.

        Il messaggio di errore è identico per utente sconosciuto e password
        errata, così non rivela quale dei due fattori è sbagliato.

        Raises:
            AuthError: Credenziali non valide o utente disattivato
        """
        identifier = data.username.strip().lower()
        result = await db.execute(
            select(User).where(
                or_(
                    func.lower(User.username) == identifier,
                    func.lower(User.email) == identifier,
                )
            )
        )
        user = result.scalars().first()

        if user is None:
            # Stesso tempo di risposta di una password errata
            dummy_verify()
        if user is None or not verify_password(data.password, user.password_hash):
            logger.warning("Tentativo di login fallito per '%s'", identifier)
            raise AuthError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.warning("Tentativo di login di utente disattivato: %s", user.username)
            raise AuthError("Account disattivato")

        logger.info("Login effettuato: %s", user.username)
        return self._auth_response(user, "Login effettuato")

    async def get_current_user(self, db: AsyncSession, token: Optional[str]) -> User:
        """
        Risolve l'utente a partire dal token di accesso.

        Raises:
            AuthError: Token mancante, invalido, scaduto, revocato oppure
                utente inesistente o disattivato
        """
        if not token:
            raise AuthError("Token di autenticazione non fornito")

        token_data = decode_token(token)

        if token_data.type != "access":
            raise AuthError("Tipo di token non valido")

        revoked = await db.get(RevokedToken, token_data.jti)
        if revoked is not None:
            raise AuthError("Sessione terminata, effettuare di nuovo il login")

        try:
            user_id = UUID(token_data.sub)
        except ValueError:
            raise AuthError("ID utente invalido nel token")

        user = await db.get(User, user_id)
        if user is None:
            raise AuthError("Utente non trovato")
        if not user.is_active:
            raise AuthError("Account disattivato")

        return user

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        data: ChangePasswordRequest,
    ) -> None:
        """
        Cambia la password dell'utente corrente.

        In caso di errore l'hash memorizzato resta invariato.

        Raises:
            ValidationError: Password attuale errata, nuova password troppo
                corta o uguale all'attuale
        """
        if not verify_password(data.current_password, user.password_hash):
            logger.warning("Cambio password rifiutato per %s: password attuale errata", user.username)
            raise ValidationError("La password attuale non è corretta")

        check_password_length(data.new_password)

        if data.new_password == data.current_password:
            raise ValidationError("La nuova password deve essere diversa da quella attuale")

        user.password_hash = hash_password(data.new_password)
        await db.flush()
        logger.info("Password aggiornata per %s", user.username)

    async def update_profile(
        self,
        db: AsyncSession,
        user: User,
        data: ProfileUpdate,
    ) -> User:
        """
        Aggiorna username e/o email dell'utente corrente.

        Raises:
            DuplicateError: Username o email già usati da un altro utente
        """
        email = data.email.lower() if data.email is not None else None
        await ensure_unique_identity(db, username=data.username, email=email, exclude_id=user.id)

        if data.username is not None:
            user.username = data.username
        if email is not None:
            user.email = email

        await flush_user(db, user)
        logger.info("Profilo aggiornato: %s", user.username)
        return user

    async def logout(self, db: AsyncSession, token: Optional[str]) -> None:
        """
        Revoca il token corrente.

        Best effort: qualsiasi errore viene registrato nel log e ignorato,
        il client scarta comunque il proprio token.
        """
        if not token:
            return
        try:
            token_data = decode_token(token)
            if await db.get(RevokedToken, token_data.jti) is None:
                db.add(
                    RevokedToken(
                        jti=token_data.jti,
                        user_id=UUID(token_data.sub),
                        expires_at=token_data.exp,
                    )
                )
                await db.commit()
        except (AuthError, SQLAlchemyError, ValueError) as e:
            await db.rollback()
            logger.info("Revoca token non riuscita, logout lato client: %s", e)

    async def get_user_by_id(self, db: AsyncSession, user_id: UUID) -> User:
        """
        Ottiene un utente per ID.

        Raises:
            NotFoundError: Se l'utente non esiste
        """
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError(f"Utente con ID {user_id} non trovato")
        return user

    async def ensure_admin(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> Optional[User]:
        """
        Crea l'amministratore iniziale se non esiste alcun admin.

        Idempotente: se un amministratore è già presente non fa nulla.

        Returns:
            L'amministratore creato, oppure None
        """
        result = await db.execute(
            select(func.count(User.id)).where(User.role == UserRole.ADMIN.value)
        )
        if result.scalar():
            return None

        check_password_length(password)
        await ensure_unique_identity(db, username=username, email=email.lower())

        admin = User(
            username=username,
            email=email.lower(),
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
            is_active=True,
        )
        db.add(admin)
        await flush_user(db, admin)
        logger.info("Amministratore iniziale creato: %s", admin.username)
        return admin


def get_auth_service() -> AuthService:
    """
    Factory per ottenere un'istanza del servizio di autenticazione.

    Returns:
        Istanza di AuthService
    """
    return AuthService()


# Export
__all__ = [
    "AuthService",
    "get_auth_service",
    "check_password_length",
    "ensure_unique_identity",
    "flush_user",
]
