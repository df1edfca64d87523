"""
Schemas Pydantic per l'autenticazione JWT
Progetto: Invoice Manager (Gestionale Fatture)

Schemas per token JWT, risposte di login e payload delle richieste auth.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.user import UserResponse


class AuthResponse(BaseModel):
    """
    Risposta di login e registrazione.

    Attributes:
        message: Messaggio per l'utente
        token: Token di accesso JWT
        token_type: Tipo di token (default: bearer)
        user: Dati dell'utente autenticato
    """

    success: bool = Field(default=True)
    message: str = Field(..., description="Messaggio per l'utente")
    token: str = Field(..., description="Token di accesso JWT")
    token_type: str = Field(default="bearer", description="Tipo di token")
    user: UserResponse = Field(..., description="Utente autenticato")


class TokenPayload(BaseModel):
    """
    Schema per il payload contenuto nei token JWT.

    Attributes:
        sub: Subject - ID dell'utente come stringa
        role: Ruolo dell'utente al momento dell'emissione
        exp: Expiration - Data/ora di scadenza
        jti: Identificativo univoco del token (revoca al logout)
        type: Tipo di token ("access")
    """

    sub: str = Field(..., description="ID utente")
    role: str = Field(..., description="Ruolo dell'utente")
    exp: datetime = Field(..., description="Data/ora di scadenza")
    jti: str = Field(..., description="ID univoco del token")
    type: str = Field(..., description="Tipo di token")


class LoginRequest(BaseModel):
    """Credenziali di login: username oppure email."""

    username: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("username", "email", "identifier"),
        description="Username o email",
    )
    password: str = Field(..., min_length=1, description="Password in chiaro")


class ChangePasswordRequest(BaseModel):
    """Cambio password dell'utente corrente."""

    current_password: str = Field(
        ...,
        validation_alias=AliasChoices("current_password", "currentPassword"),
    )
    new_password: str = Field(
        ...,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )


class MessageResponse(BaseModel):
    """Risposta generica senza payload."""

    success: bool = Field(default=True)
    message: str


# Export degli schemas
__all__ = [
    "AuthResponse",
    "TokenPayload",
    "LoginRequest",
    "ChangePasswordRequest",
    "MessageResponse",
]
