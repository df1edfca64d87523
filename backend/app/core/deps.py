"""
Dependency Injection per autenticazione e autorizzazione
Progetto: Invoice Manager (Gestionale Fatture)

Ogni endpoint protetto dichiara la capability richiesta; la tabella
ROLE_CAPABILITIES è l'unico punto in cui i ruoli vengono interpretati.
"""

from enum import Enum
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ForbiddenError
from app.models.user import User, UserRole
from app.services.auth_service import AuthService, get_auth_service

# Estrae il token dall'header "Authorization: Bearer <token>"
bearer_scheme = HTTPBearer(auto_error=False)


class Capability(str, Enum):
    """Operazioni soggette ad autorizzazione."""
    MANAGE_CLIENTS = "manage_clients"
    MANAGE_INVOICES = "manage_invoices"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: dict[str, frozenset[Capability]] = {
    UserRole.ADMIN.value: frozenset(Capability),
    UserRole.USER.value: frozenset({Capability.MANAGE_CLIENTS, Capability.MANAGE_INVOICES}),
}


def has_capability(role: str, capability: Capability) -> bool:
    """True se il ruolo concede la capability; ruoli sconosciuti non hanno permessi."""
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


async def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Token bearer grezzo, oppure None se l'header manca."""
    if credentials is None:
        return None
    return credentials.credentials


async def get_current_user(
    token: Optional[str] = Depends(get_token),
    db: AsyncSession = Depends(get_db),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Dependency per ottenere l'utente corrente dal token JWT.

    Args:
        token: Token JWT estratto dall'header Authorization
        db: Sessione database
        service: Servizio di autenticazione

    Returns:
        L'utente corrente

    Raises:
        AuthError: Se il token è mancante, invalido, scaduto o revocato
    """
    return await service.get_current_user(db, token)


def require_capability(capability: Capability):
    """
    Factory per creare una dependency che verifica la capability del ruolo.

    Example:
        @router.get("/users")
        async def list_users(admin: User = Depends(require_capability(Capability.MANAGE_USERS))):
            ...
    """
    async def capability_checker(
        current_user: Annotated[User, Depends(get_current_user)]
    ) -> User:
        """
        Raises:
            ForbiddenError: Se il ruolo non concede la capability
        """
        if not has_capability(current_user.role, capability):
            raise ForbiddenError(
                "Accesso negato: permessi di amministratore richiesti"
                if capability is Capability.MANAGE_USERS
                else "Accesso negato"
            )
        return current_user

    return capability_checker


# Type aliases per uso comune
CurrentUser = Annotated[User, Depends(get_current_user)]
ClientManager = Annotated[User, Depends(require_capability(Capability.MANAGE_CLIENTS))]
InvoiceManager = Annotated[User, Depends(require_capability(Capability.MANAGE_INVOICES))]
AdminUser = Annotated[User, Depends(require_capability(Capability.MANAGE_USERS))]


# Export
__all__ = [
    "Capability",
    "ROLE_CAPABILITIES",
    "has_capability",
    "get_token",
    "get_current_user",
    "require_capability",
    "bearer_scheme",
    "CurrentUser",
    "ClientManager",
    "InvoiceManager",
    "AdminUser",
]
