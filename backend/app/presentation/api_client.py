"""
Client HTTP per l'API del gestionale.
Progetto: Invoice Manager (Gestionale Fatture)

Ogni metodo riceve la Session esplicitamente. Una risposta 401 a una
richiesta autenticata solleva SessionExpired: il chiamante deve
rieffettuare il login.
"""

import logging
from typing import Any, Optional

import httpx

from app.presentation.session import Session

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Risposta di errore dell'API."""

    def __init__(self, status_code: int, message: str, error_code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(f"{status_code}: {message}")


class SessionExpired(ApiError):
    """Token rifiutato dal backend (scaduto, revocato o utente disattivato)."""


class InvoiceApiClient:
    """
    Wrapper sincrono sugli endpoint REST.

    Args:
        http: Client httpx da usare (es. TestClient nei test); se assente
            ne viene creato uno con il timeout indicato
        timeout: Timeout in secondi per il client creato internamente
    """

    def __init__(self, http: Optional[httpx.Client] = None, timeout: float = 30.0):
        self._owns_http = http is None
        self.http = http if http is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "InvoiceApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------
    # Trasporto
    # ------------------------------------------------------------

    def _request(
        self,
        session: Session,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        response = self.http.request(
            method,
            session.url(path),
            json=json,
            params=params,
            headers=session.headers(),
        )

        if response.status_code < 400:
            return response

        message, error_code = self._error_details(response)
        if response.status_code == 401 and session.is_authenticated:
            logger.info("Sessione scaduta su %s %s", method, path)
            raise SessionExpired(response.status_code, message, error_code)
        raise ApiError(response.status_code, message, error_code)

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple[str, Optional[str]]:
        try:
            data = response.json()
        except ValueError:
            return response.text or response.reason_phrase, None
        if isinstance(data, dict):
            return str(data.get("message") or data.get("detail") or data), data.get("error_code")
        return str(data), None

    def _json(self, session: Session, method: str, path: str, **kwargs) -> Any:
        return self._request(session, method, path, **kwargs).json()

    # ------------------------------------------------------------
    # Autenticazione
    # ------------------------------------------------------------

    def register(self, session: Session, username: str, email: str, password: str) -> Session:
        data = self._json(
            session, "POST", "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return session.authenticated(data["token"], data["user"])

    def login(self, session: Session, identifier: str, password: str) -> Session:
        data = self._json(
            session, "POST", "/api/auth/login",
            json={"username": identifier, "password": password},
        )
        return session.authenticated(data["token"], data["user"])

    def logout(self, session: Session) -> Session:
        """Revoca il token lato server; restituisce sempre una sessione anonima."""
        if session.is_authenticated:
            try:
                self._request(session, "POST", "/api/auth/logout")
            except (ApiError, httpx.HTTPError) as e:
                logger.info("Logout lato server non riuscito: %s", e)
        return session.logged_out()

    def me(self, session: Session) -> dict[str, Any]:
        return self._json(session, "GET", "/api/auth/me")

    def update_profile(self, session: Session, **fields: Any) -> Session:
        user = self._json(session, "PUT", "/api/auth/me", json=fields)
        return session.authenticated(session.token, user)

    def change_password(self, session: Session, current_password: str, new_password: str) -> str:
        data = self._json(
            session, "PUT", "/api/auth/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )
        return data["message"]

    # ------------------------------------------------------------
    # Clienti
    # ------------------------------------------------------------

    def list_clients(self, session: Session, search: Optional[str] = None) -> list[dict[str, Any]]:
        params = {"search": search} if search else None
        return self._json(session, "GET", "/api/clients", params=params)

    def get_client(self, session: Session, client_id: str) -> dict[str, Any]:
        return self._json(session, "GET", f"/api/clients/{client_id}")

    def create_client(self, session: Session, data: dict[str, Any]) -> dict[str, Any]:
        return self._json(session, "POST", "/api/clients", json=data)

    def update_client(self, session: Session, client_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._json(session, "PUT", f"/api/clients/{client_id}", json=data)

    def delete_client(self, session: Session, client_id: str) -> None:
        self._request(session, "DELETE", f"/api/clients/{client_id}")

    # ------------------------------------------------------------
    # Fatture
    # ------------------------------------------------------------

    def list_invoices(self, session: Session, search: Optional[str] = None) -> list[dict[str, Any]]:
        params = {"search": search} if search else None
        return self._json(session, "GET", "/api/invoices", params=params)

    def get_invoice(self, session: Session, invoice_id: str) -> dict[str, Any]:
        return self._json(session, "GET", f"/api/invoices/{invoice_id}")

    def create_invoice(self, session: Session, data: dict[str, Any]) -> dict[str, Any]:
        return self._json(session, "POST", "/api/invoices", json=data)

    def update_invoice(self, session: Session, invoice_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._json(session, "PUT", f"/api/invoices/{invoice_id}", json=data)

    def delete_invoice(self, session: Session, invoice_id: str) -> None:
        self._request(session, "DELETE", f"/api/invoices/{invoice_id}")

    def download_invoice_pdf(self, session: Session, invoice_id: str) -> bytes:
        return self._request(session, "GET", f"/api/invoices/{invoice_id}/pdf").content

    # ------------------------------------------------------------
    # Utenti (amministratori)
    # ------------------------------------------------------------

    def list_users(self, session: Session) -> list[dict[str, Any]]:
        return self._json(session, "GET", "/api/users")

    def create_user(self, session: Session, data: dict[str, Any]) -> dict[str, Any]:
        return self._json(session, "POST", "/api/users", json=data)

    def update_user(self, session: Session, user_id: str, data: dict[str, Any]) -> dict[str, Any]:
        return self._json(session, "PUT", f"/api/users/{user_id}", json=data)

    def delete_user(self, session: Session, user_id: str) -> None:
        self._request(session, "DELETE", f"/api/users/{user_id}")

    def reset_password(self, session: Session, user_id: str, new_password: str) -> None:
        self._request(
            session, "PUT", f"/api/users/{user_id}/reset-password",
            json={"new_password": new_password},
        )

    def set_user_active(self, session: Session, user_id: str, is_active: bool) -> dict[str, Any]:
        return self._json(
            session, "PUT", f"/api/users/{user_id}/active",
            json={"is_active": is_active},
        )

    def health(self, session: Session) -> dict[str, Any]:
        return self._json(session, "GET", "/api/health")


__all__ = ["InvoiceApiClient", "ApiError", "SessionExpired"]
