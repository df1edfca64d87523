"""
Schemas Pydantic per l'entità User
Progetto: Invoice Manager (Gestionale Fatture)

Schemas per validazione e serializzazione dati utente.
La password hashata non compare in nessuno schema di risposta.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.user import UserRole


def _normalize_username(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Lo username è obbligatorio")
    return v


class RegisterRequest(BaseModel):
    """
    Schema per l'auto-registrazione.

    Attributes:
        username: Username univoco
        email: Email univoca
        password: Password in chiaro (lunghezza minima verificata dal service)
    """

    username: str = Field(..., max_length=50, description="Username univoco")
    email: EmailStr = Field(..., description="Email univoca dell'utente")
    password: str = Field(..., max_length=128, description="Password in chiaro")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        """Rimuove gli spazi e rifiuta username vuoti."""
        return _normalize_username(v)


class UserCreate(RegisterRequest):
    """
    Schema per la creazione di un utente da parte di un amministratore.
    """

    role: UserRole = Field(default=UserRole.USER, description="Ruolo dell'utente")
    is_active: bool = Field(
        default=True,
        validation_alias=AliasChoices("is_active", "isActive"),
        description="Indica se l'utente è attivo",
    )


class UserUpdate(BaseModel):
    """
    Schema per l'aggiornamento di un utente (admin).

    Tutti i campi sono opzionali per permettere aggiornamenti parziali.
    """

    username: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = Field(None)
    role: Optional[UserRole] = Field(None)
    is_active: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("is_active", "isActive"),
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        """Rimuove gli spazi e rifiuta username vuoti."""
        return _normalize_username(v)


class ProfileUpdate(BaseModel):
    """Modifica del proprio profilo (username e email)."""

    username: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = Field(None)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        """Rimuove gli spazi e rifiuta username vuoti."""
        return _normalize_username(v)


class ResetPasswordRequest(BaseModel):
    """Reset password di un utente da parte di un amministratore."""

    new_password: str = Field(
        ...,
        max_length=128,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )


class UserActiveUpdate(BaseModel):
    """Attivazione/disattivazione di un account."""

    is_active: bool = Field(
        ...,
        validation_alias=AliasChoices("is_active", "isActive"),
    )


class UserResponse(BaseModel):
    """
    Schema per la risposta contenente dati utente.

    Utilizzato per le risposte API che espongono dati utente.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(..., description="UUID dell'utente")
    username: str = Field(..., description="Username")
    email: str = Field(..., description="Email dell'utente")
    role: UserRole = Field(..., description="Ruolo dell'utente")
    is_active: bool = Field(..., description="Indica se l'utente è attivo")
    created_at: datetime = Field(..., description="Data/ora di creazione")


# Export degli schemas
__all__ = [
    "RegisterRequest",
    "UserCreate",
    "UserUpdate",
    "ProfileUpdate",
    "ResetPasswordRequest",
    "UserActiveUpdate",
    "UserResponse",
]
