"""
Service Layer per l'entità Client
Progetto: Invoice Manager (Gestionale Fatture)

Definisce la logica di business per la gestione dei clienti:
- Validazione proattiva dei campi obbligatori
- Unicità del numero cliente senza distinzione maiuscole/minuscole
- Eliminazione fisica (le fatture conservano la propria copia dei dati)
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.models import Client
from app.schemas.client import ClientCreate, ClientUpdate

# Logger per questo modulo
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {
    "name": "nome",
    "number": "numero",
    "address": "indirizzo",
    "tax_id": "MF",
}


class ClientService:
    """
    Service per la gestione delle operazioni CRUD sui clienti.

    Fornisce metodi asincroni per interagire con il database
    in modo centralizzato, senza dipendenze da FastAPI.
    """

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
    ) -> list[Client]:
        """
        Recupera la lista dei clienti ordinata per nome.

        Args:
            db: Sessione database
            search: Termine di ricerca opzionale su nome, numero e MF

        Returns:
            Lista clienti
        """
        query = select(Client).order_by(Client.name.asc(), Client.number.asc())

        if search:
            search_term = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Client.name.ilike(search_term),
                    Client.number.ilike(search_term),
                    Client.tax_id.ilike(search_term),
                )
            )

        result = await db.execute(query)
        clients = list(result.scalars().all())
        logger.info("Recuperati %s clienti (search=%s)", len(clients), search)
        return clients

    async def get_by_id(self, db: AsyncSession, client_id: uuid.UUID) -> Client:
        """
        Recupera un cliente tramite ID.

        Raises:
            NotFoundError: Se il cliente non esiste
        """
        client = await db.get(Client, client_id)

        if client is None:
            logger.warning("Cliente non trovato: %s", client_id)
            raise NotFoundError(f"Cliente con ID {client_id} non trovato")

        return client

    async def create(self, db: AsyncSession, client_data: ClientCreate) -> Client:
        """
        Crea un nuovo cliente.

        Implementa validazione proattiva: campi obbligatori non vuoti e
        numero cliente non già in uso prima di creare il record.

        Raises:
            ValidationError: Se un campo obbligatorio è vuoto
            DuplicateError: Se il numero cliente è già in uso
        """
        values = client_data.model_dump()
        self._check_required(values)
        await self._check_number_available(db, values["number"])

        client = Client(**values)
        db.add(client)
        await self._flush(db)

        logger.info("Cliente creato: %s - %s", client.number, client.name)
        return client

    async def update(
        self,
        db: AsyncSession,
        client_id: uuid.UUID,
        client_data: ClientUpdate,
    ) -> Client:
        """
        Aggiorna un cliente esistente (solo i campi inviati).

        Raises:
            NotFoundError: Se il cliente non esiste
            ValidationError: Se un campo obbligatorio viene svuotato
            DuplicateError: Se il nuovo numero è usato da un altro cliente
        """
        client = await self.get_by_id(db, client_id)

        values = client_data.model_dump(exclude_unset=True, exclude_none=True)
        self._check_required(values, partial=True)

        if "number" in values:
            await self._check_number_available(db, values["number"], exclude_id=client.id)

        for field, value in values.items():
            setattr(client, field, value)

        await self._flush(db)
        logger.info("Cliente aggiornato: %s", client.id)
        return client

    async def delete(self, db: AsyncSession, client_id: uuid.UUID) -> None:
        """
        Elimina un cliente.

        Le fatture emesse non vengono toccate: contengono una copia
        dei dati del cliente.

        Raises:
            NotFoundError: Se il cliente non esiste
        """
        client = await self.get_by_id(db, client_id)
        await db.delete(client)
        await db.flush()
        logger.info("Cliente eliminato: %s - %s", client.number, client.name)

    # ------------------------------------------------------------
    # Helper
    # ------------------------------------------------------------

    @staticmethod
    def _check_required(values: dict, partial: bool = False) -> None:
        for field, label in REQUIRED_FIELDS.items():
            if partial and field not in values:
                continue
            value = values.get(field)
            if value is None or not str(value).strip():
                raise ValidationError(
                    f"Il campo {label} del cliente è obbligatorio",
                    extra={"field": field},
                )

    async def _check_number_available(
        self,
        db: AsyncSession,
        number: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Client.id).where(func.lower(Client.number) == number.lower())
        if exclude_id is not None:
            query = query.where(Client.id != exclude_id)

        existing = (await db.execute(query)).first()
        if existing is not None:
            logger.warning(
                "Numero cliente duplicato: %s (esistente: %s)", number, existing[0]
            )
            raise DuplicateError(
                f"Il numero cliente '{number}' è già registrato",
                extra={"field": "number"},
            )

    @staticmethod
    async def _flush(db: AsyncSession) -> None:
        # Due richieste concorrenti possono superare entrambe il controllo
        # preventivo: l'indice univoco decide chi vince.
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.warning("Violazione indice univoco clienti: %s", e.orig)
            raise DuplicateError(
                "Numero cliente già registrato per un altro cliente",
                extra={"field": "number"},
            )


def get_client_service() -> ClientService:
    """Factory per ottenere un'istanza del ClientService."""
    return ClientService()


__all__ = ["ClientService", "get_client_service"]
