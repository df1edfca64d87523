"""
Schemas Pydantic per il progetto Invoice Manager

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle richieste e risposte API.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from app.schemas import ClientRead, InvoiceRead, etc.

from app.schemas.user import (
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    UserActiveUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from app.schemas.token import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    TokenPayload,
)
from app.schemas.client import ClientCreate, ClientRead, ClientUpdate
from app.schemas.invoice import (
    InvoiceCreate,
    InvoiceItemIn,
    InvoiceItemRead,
    InvoiceRead,
    InvoiceUpdate,
)

__all__ = [
    # User
    "RegisterRequest",
    "UserCreate",
    "UserUpdate",
    "ProfileUpdate",
    "ResetPasswordRequest",
    "UserActiveUpdate",
    "UserResponse",
    # Token / Auth
    "AuthResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "MessageResponse",
    "TokenPayload",
    # Client
    "ClientCreate",
    "ClientUpdate",
    "ClientRead",
    # Invoice
    "InvoiceItemIn",
    "InvoiceItemRead",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceRead",
]
