"""
Modelli Database SQLAlchemy
Progetto: Invoice Manager (Gestionale Fatture)

Import centralizzato di tutti i modelli per create_all e usage generico.
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


from app.models.user import User, UserRole, RevokedToken
from app.models.client import Client
from app.models.invoice import Invoice, InvoiceItem

__all__ = [
    "Base",
    "User",
    "UserRole",
    "RevokedToken",
    "Client",
    "Invoice",
    "InvoiceItem",
]
