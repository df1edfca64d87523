"""
Contesto di sessione del livello di presentazione.

La sessione è un valore immutabile passato esplicitamente ad ogni
chiamata API: login e logout restituiscono una nuova sessione.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

DEFAULT_BASE_URL = "http://localhost:8000"


@dataclass(frozen=True)
class Session:
    """
    Attributes:
        base_url: Indirizzo del backend
        token: Token di accesso, None se anonima
        user: Dati dell'utente autenticato come restituiti dall'API
    """

    base_url: str = DEFAULT_BASE_URL
    token: Optional[str] = None
    user: Optional[dict[str, Any]] = field(default=None, compare=False)

    @classmethod
    def anonymous(cls, base_url: str = DEFAULT_BASE_URL) -> "Session":
        return cls(base_url=base_url)

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_admin(self) -> bool:
        return bool(self.user) and self.user.get("role") == "admin"

    def authenticated(self, token: str, user: dict[str, Any]) -> "Session":
        """Nuova sessione autenticata sullo stesso backend."""
        return replace(self, token=token, user=user)

    def logged_out(self) -> "Session":
        return Session.anonymous(self.base_url)

    def headers(self) -> dict[str, str]:
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


__all__ = ["Session", "DEFAULT_BASE_URL"]
