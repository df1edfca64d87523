"""
Modelli SQLAlchemy per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Contiene:
- Invoice: Fattura con copia dei dati cliente al momento dell'emissione
- InvoiceItem: Righe della fattura (di proprietà esclusiva della fattura)
"""

from __future__ import annotations

import uuid
import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin

# Importi in millimes: 3 decimali
MONEY = Numeric(14, 3)


class Invoice(Base, UUIDMixin, TimestampMixin):
    """
    Modello per le fatture.

    I campi client_* sono una fotografia del cliente al momento della
    creazione, non un riferimento: la fattura resta storicamente esatta
    anche se il cliente viene modificato o eliminato.

    Gli importi sono sempre ricalcolati dal service a partire dalle righe
    (vedi app.services.totals).

    Attributes:
        id: UUID primary key, generato automaticamente
        invoice_number: Numero progressivo annuale (formato: YYYY/NNNN)
        client_name: Nome cliente (copia)
        client_number: Numero cliente (copia)
        client_address: Indirizzo cliente (copia)
        client_tax_id: MF cliente (copia)
        delivery_person_name: Livreur
        date: Data della fattura
        total_ht: Totale hors taxe
        total_tva: Importo TVA
        stamp_duty: Timbre fiscale
        total_discount: Totale remise
        total_ttc: Totale toutes taxes comprises (somma delle righe)
        with_tva: Se False la fattura non scorpora la TVA
        pinned: Fattura evidenziata in lista
        created_at: Data/ora creazione record
        updated_at: Data/ora ultimo aggiornamento

    Relationships:
        items: Righe della fattura, ordinate per posizione
    """

    __tablename__ = "invoices"

    # ------------------------------------------------------------
    # Colonne Identificazione
    # ------------------------------------------------------------
    invoice_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        unique=True,
        doc="Numero fattura progressivo annuale (formato: YYYY/NNNN)",
    )

    date: Mapped[datetime.date] = mapped_column(
        Date,
        nullable=False,
        doc="Data della fattura",
    )

    # ------------------------------------------------------------
    # Colonne Cliente (copia denormalizzata)
    # ------------------------------------------------------------
    client_name: Mapped[str] = mapped_column(String(200), nullable=False)
    client_number: Mapped[str] = mapped_column(String(50), nullable=False)
    client_address: Mapped[str] = mapped_column(String(500), nullable=False)
    client_tax_id: Mapped[str] = mapped_column(String(50), nullable=False)

    delivery_person_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        doc="Nome del livreur",
    )

    # ------------------------------------------------------------
    # Colonne Importi
    # ------------------------------------------------------------
    total_ht: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    total_tva: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    stamp_duty: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0.1"))
    total_discount: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    total_ttc: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))

    # ------------------------------------------------------------
    # Flag
    # ------------------------------------------------------------
    with_tva: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    items: Mapped[List["InvoiceItem"]] = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.position",
        lazy="selectin",
        doc="Righe della fattura",
    )

    # ------------------------------------------------------------
    # Indici e Vincoli
    # ------------------------------------------------------------
    __table_args__ = (
        Index("ix_invoices_created_at", "created_at"),
        Index("ix_invoices_client_number", "client_number"),
        CheckConstraint("total_ht >= 0", name="ck_invoices_total_ht_positive"),
        CheckConstraint("total_tva >= 0", name="ck_invoices_total_tva_positive"),
        CheckConstraint("stamp_duty >= 0", name="ck_invoices_stamp_duty_positive"),
        CheckConstraint("total_discount >= 0", name="ck_invoices_discount_positive"),
        CheckConstraint("total_ttc >= 0", name="ck_invoices_total_ttc_positive"),
    )

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.invoice_number}, total_ttc={self.total_ttc})>"


class InvoiceItem(Base, UUIDMixin):
    """
    Riga della fattura.

    Non ha identità propria al di fuori della fattura: viene eliminata
    insieme ad essa e sostituita in blocco quando la fattura è aggiornata.

    Attributes:
        invoice_id: UUID della fattura padre
        position: Ordine della riga nella fattura (da 0)
        designation: Descrizione dell'articolo
        quantity: Quantità
        unit_price: Prezzo unitario TTC
        total_price: quantity × unit_price
    """

    __tablename__ = "invoice_items"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="UUID della fattura padre",
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    designation: Mapped[str] = mapped_column(String(500), nullable=False)

    quantity: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    total_price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    invoice: Mapped["Invoice"] = relationship(
        "Invoice",
        back_populates="items",
        doc="Fattura padre",
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_invoice_items_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_invoice_items_unit_price_positive"),
    )

    def __repr__(self) -> str:
        return f"<InvoiceItem(designation={self.designation}, total_price={self.total_price})>"
