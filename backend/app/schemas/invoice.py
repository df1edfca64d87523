"""
Schemas Pydantic per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Contiene:
- Schemas per InvoiceItem
- Schemas per Invoice (creazione, aggiornamento parziale, lettura)

Gli importi inviati dal client (total_price, total_ht, total_ttc, ...)
non fanno parte degli schemi di input: vengono ignorati e ricalcolati.
"""

import datetime
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# -------------------------------------------------------------------
# Schemas per InvoiceItem
# -------------------------------------------------------------------

class InvoiceItemIn(BaseModel):
    """Riga fattura in input: l'importo di riga viene calcolato."""

    model_config = ConfigDict(str_strip_whitespace=True)

    designation: str = Field(..., max_length=500, description="Designazione articolo")
    quantity: Decimal = Field(..., description="Quantità")
    unit_price: Decimal = Field(
        ...,
        validation_alias=AliasChoices("unit_price", "unitPrice"),
        description="Prezzo unitario TTC",
    )


class InvoiceItemRead(BaseModel):
    """Riga fattura in output."""

    model_config = ConfigDict(from_attributes=True)

    designation: str
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal


# -------------------------------------------------------------------
# Schemas per Invoice
# -------------------------------------------------------------------

class InvoiceCreate(BaseModel):
    """
    Schema per la creazione di una fattura.

    I dati del cliente possono essere inviati esplicitamente oppure
    copiati dall'anagrafica indicando client_id; i campi espliciti
    hanno la precedenza sulla copia.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: Optional[uuid.UUID] = Field(
        None,
        validation_alias=AliasChoices("client_id", "clientId"),
        description="Cliente da cui copiare i dati",
    )
    client_name: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("client_name", "clientName"),
    )
    client_number: Optional[str] = Field(
        None,
        max_length=50,
        validation_alias=AliasChoices("client_number", "clientNumber"),
    )
    client_address: Optional[str] = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("client_address", "clientAddress"),
    )
    client_tax_id: Optional[str] = Field(
        None,
        max_length=50,
        validation_alias=AliasChoices("client_tax_id", "clientTaxId", "clientMF"),
    )
    delivery_person_name: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("delivery_person_name", "deliveryPersonName", "livreurNom"),
    )
    date: Optional[datetime.date] = Field(None, description="Data fattura (default: oggi)")
    items: list[InvoiceItemIn] = Field(default_factory=list)
    total_discount: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("total_discount", "totalDiscount", "totalRemise", "discount"),
        description="Totale remise",
    )
    stamp_duty: Optional[Decimal] = Field(
        None,
        validation_alias=AliasChoices("stamp_duty", "stampDuty", "timbre"),
        description="Timbre fiscale (default da configurazione)",
    )
    with_tva: bool = Field(
        True,
        validation_alias=AliasChoices("with_tva", "withTVA", "withTva"),
    )
    pinned: bool = Field(False)


class InvoiceUpdate(BaseModel):
    """
    Aggiornamento parziale di una fattura.

    Se `items` è presente sostituisce tutte le righe. Gli importi sono
    comunque ricalcolati ad ogni aggiornamento.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    client_name: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("client_name", "clientName"),
    )
    client_number: Optional[str] = Field(
        None,
        max_length=50,
        validation_alias=AliasChoices("client_number", "clientNumber"),
    )
    client_address: Optional[str] = Field(
        None,
        max_length=500,
        validation_alias=AliasChoices("client_address", "clientAddress"),
    )
    client_tax_id: Optional[str] = Field(
        None,
        max_length=50,
        validation_alias=AliasChoices("client_tax_id", "clientTaxId", "clientMF"),
    )
    delivery_person_name: Optional[str] = Field(
        None,
        max_length=200,
        validation_alias=AliasChoices("delivery_person_name", "deliveryPersonName", "livreurNom"),
    )
    date: Optional[datetime.date] = None
    items: Optional[list[InvoiceItemIn]] = None
    total_discount: Optional[Decimal] = Field(
        None,
        validation_alias=AliasChoices("total_discount", "totalDiscount", "totalRemise", "discount"),
    )
    stamp_duty: Optional[Decimal] = Field(
        None,
        validation_alias=AliasChoices("stamp_duty", "stampDuty", "timbre"),
    )
    with_tva: Optional[bool] = Field(
        None,
        validation_alias=AliasChoices("with_tva", "withTVA", "withTva"),
    )
    pinned: Optional[bool] = None


class InvoiceRead(BaseModel):
    """Fattura completa in output."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    invoice_number: str
    client_name: str
    client_number: str
    client_address: str
    client_tax_id: str
    delivery_person_name: str
    date: datetime.date
    items: list[InvoiceItemRead]
    total_ht: Decimal
    total_tva: Decimal
    stamp_duty: Decimal
    total_discount: Decimal
    total_ttc: Decimal
    with_tva: bool
    pinned: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime


__all__ = [
    "InvoiceItemIn",
    "InvoiceItemRead",
    "InvoiceCreate",
    "InvoiceUpdate",
    "InvoiceRead",
]
