"""
Router FastAPI per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Definisce gli endpoint API per la gestione delle fatture:
operazioni CRUD ed esportazione PDF.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import InvoiceManager
from app.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceUpdate
from app.schemas.token import MessageResponse
from app.services.invoice_service import InvoiceService, get_invoice_service

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Router con prefix e tag
router = APIRouter(
    prefix="/invoices",
    tags=["Fatturazione"],
)


@router.get(
    "",
    name="fatture_lista",
    summary="Lista fatture",
    description="Recupera le fatture dalla più recente, con eventuale filtro di ricerca.",
    response_model=list[InvoiceRead],
    status_code=status.HTTP_200_OK,
)
async def get_invoices(
    _: InvoiceManager,
    search: Optional[str] = Query(None, description="Numero fattura, nome o numero cliente"),
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> list[InvoiceRead]:
    """Recupera la lista delle fatture con le righe."""
    invoices = await service.get_all(db=db, search=search)
    return [InvoiceRead.model_validate(i) for i in invoices]


@router.get(
    "/{invoice_id}",
    name="fattura_dettaglio",
    summary="Dettaglio fattura",
    response_model=InvoiceRead,
    status_code=status.HTTP_200_OK,
)
async def get_invoice(
    invoice_id: uuid.UUID,
    _: InvoiceManager,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    """
    Recupera una fattura con le sue righe.

    Raises:
        NotFoundError: Se la fattura non esiste
    """
    invoice = await service.get_by_id(db=db, invoice_id=invoice_id)
    return InvoiceRead.model_validate(invoice)


@router.post(
    "",
    name="fattura_crea",
    summary="Crea fattura",
    description="Crea una fattura; numero e importi sono calcolati dal server.",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    data: InvoiceCreate,
    _: InvoiceManager,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    """
    Crea una nuova fattura.

    Raises:
        NotFoundError: client_id indicato ma inesistente
        ValidationError: dati cliente mancanti o righe non valide
        ConflictError: numero fattura assegnato in concorrenza
    """
    invoice = await service.create(db=db, data=data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.put(
    "/{invoice_id}",
    name="fattura_aggiorna",
    summary="Aggiorna fattura",
    response_model=InvoiceRead,
    status_code=status.HTTP_200_OK,
)
async def update_invoice(
    invoice_id: uuid.UUID,
    data: InvoiceUpdate,
    _: InvoiceManager,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> InvoiceRead:
    """
    Aggiorna una fattura; gli importi vengono ricalcolati.

    Raises:
        NotFoundError: Se la fattura non esiste
        ValidationError: dati non validi
    """
    invoice = await service.update(db=db, invoice_id=invoice_id, data=data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.delete(
    "/{invoice_id}",
    name="fattura_elimina",
    summary="Elimina fattura",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_invoice(
    invoice_id: uuid.UUID,
    _: InvoiceManager,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> MessageResponse:
    """
    Elimina una fattura e le sue righe.

    Raises:
        NotFoundError: Se la fattura non esiste
    """
    await service.delete(db=db, invoice_id=invoice_id)
    await db.commit()
    return MessageResponse(message="Fattura eliminata con successo")


@router.get(
    "/{invoice_id}/pdf",
    name="fattura_pdf",
    summary="Scarica PDF fattura",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def download_invoice_pdf(
    invoice_id: uuid.UUID,
    _: InvoiceManager,
    db: AsyncSession = Depends(get_db),
    service: InvoiceService = Depends(get_invoice_service),
) -> Response:
    """
    Genera e restituisce il PDF della fattura come allegato.

    Raises:
        NotFoundError: Se la fattura non esiste
    """
    invoice, pdf_bytes = await service.render_pdf(db=db, invoice_id=invoice_id)
    filename = f"facture-{invoice.invoice_number.replace('/', '-')}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
