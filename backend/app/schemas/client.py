"""
Schemas Pydantic per l'entità Client
Progetto: Invoice Manager (Gestionale Fatture)
"""
# Definisce gli schemi di validazione e serializzazione per l'API.

import datetime
import uuid
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# I campi arrivano anche con i nomi del vecchio frontend (mf, taxId)
TAX_ID_ALIASES = AliasChoices("tax_id", "taxId", "mf", "MF")


class ClientCreate(BaseModel):
    """
    Schema per la creazione di un nuovo cliente.

    Le stringhe sono ripulite dagli spazi; i campi vuoti vengono
    rifiutati dal ClientService con una ValidationError.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., max_length=200, description="Nome o ragione sociale")
    number: str = Field(..., max_length=50, description="Numero cliente (univoco)")
    address: str = Field(..., max_length=500, description="Indirizzo completo")
    tax_id: str = Field(
        ...,
        max_length=50,
        validation_alias=TAX_ID_ALIASES,
        description="Matricola fiscale (MF)",
    )


class ClientUpdate(BaseModel):
    """
    Schema per l'aggiornamento di un cliente esistente.

    Tutti i campi sono opzionali: si aggiornano solo quelli inviati.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, max_length=200)
    number: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    tax_id: Optional[str] = Field(
        None,
        max_length=50,
        validation_alias=TAX_ID_ALIASES,
    )


class ClientRead(BaseModel):
    """Schema per la risposta API che include i campi di sistema."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID = Field(..., description="UUID del cliente")
    name: str
    number: str
    address: str
    tax_id: str
    created_at: datetime.datetime = Field(..., description="Data/ora di creazione")
    updated_at: datetime.datetime = Field(..., description="Data/ora ultimo aggiornamento")


__all__ = [
    "ClientCreate",
    "ClientUpdate",
    "ClientRead",
]
