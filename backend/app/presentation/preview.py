"""
Anteprima fattura lato presentazione.

Gli importi mostrati durante la compilazione usano la stessa funzione
del backend, così l'anteprima coincide con quanto verrà salvato.
"""

from datetime import date
from typing import Any, Iterable, Optional

from app.core.config import settings
from app.services.pdf_service import PdfService
from app.services.totals import InvoiceTotals, compute_totals


def preview_totals(items: Iterable[Any], with_tva: bool = True) -> InvoiceTotals:
    """Importi HT/TVA/TTC delle righe in compilazione (dict o oggetti)."""
    return compute_totals(items, with_tva, settings.vat_rate)


def render_invoice_html(
    invoice: dict[str, Any],
    printed_on: Optional[date] = None,
    printed_by: Optional[str] = None,
    pdf_service: Optional[PdfService] = None,
) -> str:
    """HTML di anteprima di una fattura restituita dall'API."""
    service = pdf_service or PdfService()
    return service.render_invoice_html(invoice, printed_on=printed_on, printed_by=printed_by)


__all__ = ["preview_totals", "render_invoice_html"]
