"""
Service Layer per la Fatturazione
Progetto: Invoice Manager (Gestionale Fatture)

Definisce la logica di business per la gestione delle fatture:
creazione con copia dei dati cliente, numerazione progressiva annuale,
ricalcolo degli importi ad ogni scrittura ed esportazione PDF.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import or_, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import Client, Invoice, InvoiceItem
from app.schemas.invoice import InvoiceCreate, InvoiceItemIn, InvoiceUpdate
from app.services.pdf_service import PdfService
from app.services.totals import compute_totals, line_total, round_money

# Logger per questo modulo
logger = logging.getLogger(__name__)

CLIENT_SNAPSHOT_FIELDS = {
    "client_name": ("name", "nome cliente"),
    "client_number": ("number", "numero cliente"),
    "client_address": ("address", "indirizzo cliente"),
    "client_tax_id": ("tax_id", "MF cliente"),
}

# Massimo rappresentabile da Numeric(14, 3)
MAX_AMOUNT = Decimal("99999999999.999")


def _bounded(value: Decimal, label: str, extra: Optional[dict] = None) -> Decimal:
    """Arrotonda a 3 decimali un valore finito entro MAX_AMOUNT."""
    if not value.is_finite() or abs(value) > MAX_AMOUNT:
        raise ValidationError(f"{label} è fuori dall'intervallo consentito", extra=extra)
    return round_money(value)


class InvoiceService:
    """
    Service per la gestione delle operazioni sulle fatture.

    Implementa:
    - Copia dei dati cliente al momento della creazione
    - Numerazione progressiva annuale (YYYY/NNNN)
    - Ricalcolo degli importi dalle righe ad ogni create/update
    - Generazione PDF tramite PdfService
    """

    def __init__(self, pdf_service: Optional[PdfService] = None):
        self.pdf_service = pdf_service or PdfService()

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
    ) -> list[Invoice]:
        """
        Recupera le fatture, dalla più recente alla meno recente.

        Args:
            db: Sessione database
            search: Filtro opzionale su numero fattura, nome e numero cliente

        Returns:
            Lista fatture con righe caricate
        """
        stmt = select(Invoice).order_by(
            Invoice.created_at.desc(),
            Invoice.invoice_number.desc(),
        )

        if search:
            search_term = f"%{search.strip()}%"
            stmt = stmt.where(
                or_(
                    Invoice.invoice_number.ilike(search_term),
                    Invoice.client_name.ilike(search_term),
                    Invoice.client_number.ilike(search_term),
                )
            )

        result = await db.execute(stmt)
        invoices = list(result.scalars().all())
        logger.info("Recuperate %s fatture (search=%s)", len(invoices), search)
        return invoices

    async def get_by_id(self, db: AsyncSession, invoice_id: uuid.UUID) -> Invoice:
        """
        Recupera una fattura per ID con le righe caricate.

        Raises:
            NotFoundError: Fattura non trovata
        """
        invoice = await db.get(Invoice, invoice_id)

        if not invoice:
            logger.warning("Fattura non trovata: %s", invoice_id)
            raise NotFoundError(f"Fattura {invoice_id} non trovata")

        return invoice

    async def create(self, db: AsyncSession, data: InvoiceCreate) -> Invoice:
        """
        Crea una fattura.

        Steps:
        1. Copia i dati del cliente (da client_id e/o campi espliciti)
        2. Valida righe, remise e timbre
        3. Calcola gli importi dalle righe (gli importi inviati sono ignorati)
        4. Genera il numero progressivo annuale
        5. Salva fattura e righe

        Raises:
            NotFoundError: client_id indicato ma inesistente
            ValidationError: dati cliente mancanti, nessuna riga, riga non valida
            ConflictError: numero fattura già usato da una richiesta concorrente
        """
        snapshot = await self._client_snapshot(db, data)

        items = self._build_items(data.items)
        discount = self._non_negative(data.total_discount, "La remise")
        stamp_duty = self._non_negative(
            data.stamp_duty if data.stamp_duty is not None else settings.stamp_duty_amount,
            "Il timbre",
        )
        invoice_date = data.date or date.today()
        delivery_person = (data.delivery_person_name or "").strip() or settings.default_delivery_person

        invoice = Invoice(
            invoice_number=await self._generate_invoice_number(db, invoice_date),
            date=invoice_date,
            delivery_person_name=delivery_person,
            total_discount=discount,
            stamp_duty=stamp_duty,
            with_tva=data.with_tva,
            pinned=data.pinned,
            items=items,
            **snapshot,
        )
        self._apply_totals(invoice)

        db.add(invoice)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.error("Numero fattura duplicato %s: %s", invoice.invoice_number, e.orig)
            raise ConflictError(
                f"Il numero fattura {invoice.invoice_number} è già stato assegnato, riprovare"
            )

        logger.info(
            "Fattura %s creata per %s: TTC %s",
            invoice.invoice_number, invoice.client_name, invoice.total_ttc,
        )
        return invoice

    async def update(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        data: InvoiceUpdate,
    ) -> Invoice:
        """
        Aggiorna una fattura (solo i campi inviati).

        Le righe inviate sostituiscono le precedenti; gli importi sono
        ricalcolati in ogni caso. Il numero fattura non è modificabile.

        Raises:
            NotFoundError: Fattura non trovata
            ValidationError: dati non validi
        """
        invoice = await self.get_by_id(db, invoice_id)
        values = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"items"})

        for field, (_, label) in CLIENT_SNAPSHOT_FIELDS.items():
            if field in values and not values[field]:
                raise ValidationError(f"Il campo {label} è obbligatorio", extra={"field": field})

        if "delivery_person_name" in values and not values["delivery_person_name"]:
            values["delivery_person_name"] = settings.default_delivery_person
        if "total_discount" in values:
            values["total_discount"] = self._non_negative(values["total_discount"], "La remise")
        if "stamp_duty" in values:
            values["stamp_duty"] = self._non_negative(values["stamp_duty"], "Il timbre")

        for field, value in values.items():
            setattr(invoice, field, value)

        if data.items is not None:
            invoice.items = self._build_items(data.items)

        self._apply_totals(invoice)
        await db.flush()

        logger.info("Fattura %s aggiornata: TTC %s", invoice.invoice_number, invoice.total_ttc)
        return invoice

    async def delete(self, db: AsyncSession, invoice_id: uuid.UUID) -> None:
        """
        Elimina una fattura insieme alle sue righe.

        Raises:
            NotFoundError: Fattura non trovata
        """
        invoice = await self.get_by_id(db, invoice_id)
        await db.delete(invoice)
        await db.flush()
        logger.info("Fattura %s eliminata", invoice.invoice_number)

    async def render_pdf(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        printed_on: Optional[date] = None,
    ) -> tuple[Invoice, bytes]:
        """
        Genera il PDF di una fattura.

        Returns:
            Tuple di (fattura, PDF binario)

        Raises:
            NotFoundError: Fattura non trovata
        """
        invoice = await self.get_by_id(db, invoice_id)
        pdf_bytes = self.pdf_service.generate_invoice_pdf(invoice, printed_on=printed_on)
        logger.info("PDF generato per fattura %s (%s byte)", invoice.invoice_number, len(pdf_bytes))
        return invoice, pdf_bytes

    # ------------------------------------------------------------
    # Helper
    # ------------------------------------------------------------

    async def _client_snapshot(self, db: AsyncSession, data: InvoiceCreate) -> dict[str, str]:
        """Dati cliente da copiare nella fattura; i campi espliciti hanno la precedenza."""
        snapshot: dict[str, Optional[str]] = {
            field: getattr(data, field) for field in CLIENT_SNAPSHOT_FIELDS
        }

        if data.client_id is not None:
            client = await db.get(Client, data.client_id)
            if client is None:
                raise NotFoundError(f"Cliente con ID {data.client_id} non trovato")
            for field, (client_attr, _) in CLIENT_SNAPSHOT_FIELDS.items():
                if not snapshot[field]:
                    snapshot[field] = getattr(client, client_attr)

        for field, (_, label) in CLIENT_SNAPSHOT_FIELDS.items():
            if not snapshot[field]:
                raise ValidationError(f"Il campo {label} è obbligatorio", extra={"field": field})

        return snapshot  # type: ignore[return-value]

    @staticmethod
    def _build_items(items_in: Iterable[InvoiceItemIn]) -> list[InvoiceItem]:
        """
        Valida le righe e costruisce gli InvoiceItem con l'importo calcolato.

        Raises:
            ValidationError: nessuna riga, designazione vuota, quantità <= 0,
                prezzo negativo
        """
        items: list[InvoiceItem] = []
        for position, item in enumerate(items_in):
            row = position + 1
            if not item.designation:
                raise ValidationError(
                    f"Riga {row}: la designazione è obbligatoria",
                    extra={"item": position},
                )
            quantity = _bounded(item.quantity, f"Riga {row}: la quantità", {"item": position})
            unit_price = _bounded(item.unit_price, f"Riga {row}: il prezzo unitario", {"item": position})
            if quantity <= 0:
                raise ValidationError(
                    f"Riga {row}: la quantità deve essere maggiore di zero",
                    extra={"item": position},
                )
            if unit_price < 0:
                raise ValidationError(
                    f"Riga {row}: il prezzo unitario non può essere negativo",
                    extra={"item": position},
                )

            total_price = _bounded(
                line_total(quantity, unit_price), f"Riga {row}: l'importo", {"item": position}
            )
            items.append(
                InvoiceItem(
                    position=position,
                    designation=item.designation,
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=total_price,
                )
            )

        if not items:
            raise ValidationError("La fattura deve contenere almeno una riga")

        return items

    @staticmethod
    def _non_negative(value: Decimal, label: str) -> Decimal:
        value = _bounded(value, label)
        if value < 0:
            raise ValidationError(f"{label} non può essere negativo")
        return value

    @staticmethod
    def _apply_totals(invoice: Invoice) -> None:
        """Ricalcola gli importi della fattura dalle sue righe."""
        totals = compute_totals(invoice.items, invoice.with_tva, settings.vat_rate)
        _bounded(totals.total_ttc, "Il totale TTC")
        invoice.total_ttc = totals.total_ttc
        invoice.total_ht = totals.total_ht
        invoice.total_tva = totals.total_tva

    async def _generate_invoice_number(self, db: AsyncSession, invoice_date: date) -> str:
        """
        Genera numero fattura progressivo annuale.

        Formato: YYYY/NNNN (es. 2025/0001)

        Su PostgreSQL un advisory lock di transazione serializza la
        numerazione; altrove decide l'indice univoco su invoice_number.

        Raises:
            ConflictError: Se si raggiunge il limite di 9999 fatture annue
        """
        year = invoice_date.year
        year_prefix = f"{year}/"

        if db.get_bind().dialect.name == "postgresql":
            await db.execute(text("SELECT pg_advisory_xact_lock(:lock_key)"), {"lock_key": year})

        stmt = (
            select(Invoice.invoice_number)
            .where(Invoice.invoice_number.like(f"{year_prefix}%"))
            .order_by(Invoice.invoice_number.desc())
            .limit(1)
        )
        last_number = (await db.execute(stmt)).scalar_one_or_none()

        next_number = int(last_number.split("/")[1]) + 1 if last_number else 1

        if next_number > 9999:
            raise ConflictError(f"Limite numerazione fatture raggiunto per l'anno {year}")

        return f"{year_prefix}{next_number:04d}"


def get_invoice_service() -> InvoiceService:
    """Factory per ottenere un'istanza dell'InvoiceService."""
    return InvoiceService()


__all__ = ["InvoiceService", "get_invoice_service"]
