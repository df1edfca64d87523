"""
Modello SQLAlchemy per l'entità Client
Progetto: Invoice Manager (Gestionale Fatture)

Rappresenta l'anagrafica dei clienti.
"""


from __future__ import annotations

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin


class Client(Base, UUIDMixin, TimestampMixin):
    """
    Modello per l'anagrafica clienti.

    Le fatture non referenziano il cliente: ne copiano i dati alla
    creazione, quindi eliminare un cliente non modifica alcuna fattura.

    Attributes:
        id: UUID primary key, generato automaticamente
        name: Nome o ragione sociale
        number: Numero cliente, univoco senza distinzione maiuscole/minuscole
        address: Indirizzo completo
        tax_id: Matricola fiscale (MF)
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento
    """

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Nome o ragione sociale",
    )

    number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Numero cliente",
    )

    address: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        doc="Indirizzo completo",
    )

    tax_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Matricola fiscale (MF)",
    )

    __table_args__ = (
        Index("ix_clients_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, number={self.number}, name={self.name})>"


# Unicità case-insensitive del numero cliente (indice funzionale)
Index("uq_clients_number_lower", func.lower(Client.number), unique=True)
