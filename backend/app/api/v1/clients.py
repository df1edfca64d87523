"""
Router FastAPI per l'entità Client
Progetto: Invoice Manager (Gestionale Fatture)

Definisce gli endpoint API per la gestione dei clienti.
Tutti gli endpoint richiedono un utente autenticato.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import ClientManager
from app.schemas.client import ClientCreate, ClientRead, ClientUpdate
from app.schemas.token import MessageResponse
from app.services.client_service import ClientService, get_client_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Router con prefix e tag
router = APIRouter(
    prefix="/clients",
    tags=["Clienti"],
)


@router.get(
    "",
    name="clienti_lista",
    summary="Lista clienti",
    description="Recupera la lista dei clienti con eventuale filtro di ricerca.",
    response_model=list[ClientRead],
    status_code=status.HTTP_200_OK,
)
async def get_clients(
    _: ClientManager,
    search: Optional[str] = Query(None, description="Termine di ricerca"),
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> list[ClientRead]:
    """
    Recupera la lista dei clienti ordinata per nome.

    Args:
        search: Termine di ricerca opzionale su nome, numero e MF
        db: Sessione database
        service: Istanza del ClientService (iniettata automaticamente)
    """
    clients = await service.get_all(db=db, search=search)
    return [ClientRead.model_validate(c) for c in clients]


@router.get(
    "/{client_id}",
    name="cliente_dettaglio",
    summary="Dettaglio cliente",
    response_model=ClientRead,
    status_code=status.HTTP_200_OK,
)
async def get_client(
    client_id: uuid.UUID,
    _: ClientManager,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    """
    Recupera i dettagli di un cliente.

    Raises:
        NotFoundError: Se il cliente non esiste
    """
    client = await service.get_by_id(db=db, client_id=client_id)
    return ClientRead.model_validate(client)


@router.post(
    "",
    name="cliente_crea",
    summary="Crea cliente",
    response_model=ClientRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_client(
    client_data: ClientCreate,
    _: ClientManager,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    """
    Crea un nuovo cliente.

    Raises:
        ValidationError: Se un campo obbligatorio è vuoto
        DuplicateError: Se il numero cliente è già in uso
    """
    client = await service.create(db=db, client_data=client_data)
    await db.commit()
    return ClientRead.model_validate(client)


@router.put(
    "/{client_id}",
    name="cliente_aggiorna",
    summary="Aggiorna cliente",
    response_model=ClientRead,
    status_code=status.HTTP_200_OK,
)
async def update_client(
    client_id: uuid.UUID,
    client_data: ClientUpdate,
    _: ClientManager,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> ClientRead:
    """
    Aggiorna un cliente esistente.

    Raises:
        NotFoundError: Se il cliente non esiste
        DuplicateError: Se il numero è già usato da un altro cliente
    """
    client = await service.update(db=db, client_id=client_id, client_data=client_data)
    await db.commit()
    return ClientRead.model_validate(client)


@router.delete(
    "/{client_id}",
    name="cliente_elimina",
    summary="Elimina cliente",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_client(
    client_id: uuid.UUID,
    _: ClientManager,
    db: AsyncSession = Depends(get_db),
    service: ClientService = Depends(get_client_service),
) -> MessageResponse:
    """
    Elimina un cliente. Le fatture già emesse restano invariate.

    Raises:
        NotFoundError: Se il cliente non esiste
    """
    await service.delete(db=db, client_id=client_id)
    await db.commit()
    return MessageResponse(message="Cliente eliminato con successo")
