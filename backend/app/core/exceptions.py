"""
Eccezioni Custom per l'applicazione.
Progetto: Invoice Manager (Gestionale Fatture)

Definisce eccezioni specifiche del dominio per una gestione
centralizzata degli errori. Ogni eccezione conosce il proprio
status HTTP: gli handler in app.main le convertono nel body
`{"success": false, "message": ...}`.

NOTA: ValidationError è volutamente distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati di input
- ValidationError: violazioni delle regole di business (duplicati, campi vuoti)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "ValidationError",
    "DuplicateError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo univoco dell'errore per il frontend
        detail: Messaggio di errore leggibile per l'utente
        extra: Dizionario con dati aggiuntivi per il frontend
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"
    default_detail: str = "Errore interno del server"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione.

        Args:
            detail: Messaggio di errore dettagliato (default: quello di classe)
            error_code: Identificativo univoco (default: quello di classe)
            extra: Dati aggiuntivi da passare al frontend (default: None)
        """
        self.detail = detail if detail is not None else self.default_detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(self.detail)


class ValidationError(ValueError, AppException):
    """
    Input non valido: campi obbligatori vuoti, password troppo corta,
    righe fattura non valide, password attuale errata.

    Eredita da ValueError per essere catturata dai validatori Pydantic.
    """

    status_code: int = 400
    error_code: str = "VALIDATION_ERROR"
    default_detail: str = "Validazione dati fallita"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


class DuplicateError(ValidationError):
    """
    Violazione di unicità (numero cliente, username, email).

    È una ValidationError: il client riceve 400 come per ogni input non valido.
    """

    error_code: str = "DUPLICATE_RESOURCE"
    default_detail: str = "Risorsa già esistente"


class AuthError(AppException):
    """
    Credenziali errate oppure token mancante, invalido, scaduto o revocato.
    """

    status_code: int = 401
    error_code: str = "UNAUTHENTICATED"
    default_detail: str = "Autenticazione richiesta"


class ForbiddenError(AppException):
    """
    Utente autenticato ma senza il permesso richiesto dall'operazione.

    Esempi di utilizzo:
        - "Solo gli amministratori possono gestire gli utenti"
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"
    default_detail: str = "Accesso non autorizzato"


class NotFoundError(AppException):
    """Eccezione sollevata quando una risorsa non viene trovata."""

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"
    default_detail: str = "Risorsa non trovata"


class ConflictError(AppException):
    """
    Violazione di vincolo a livello di storage non intercettata dai controlli
    preventivi (es. numero fattura generato in concorrenza).
    """

    status_code: int = 409
    error_code: str = "CONFLICT"
    default_detail: str = "Conflitto con lo stato corrente della risorsa"
