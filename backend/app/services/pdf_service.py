"""
Service per la generazione di PDF con WeasyPrint + Jinja2.
Progetto: Invoice Manager (Gestionale Fatture)

Lo stesso template HTML serve sia per il PDF scaricabile sia per
l'anteprima del livello di presentazione.
"""

import logging
import os
from datetime import date, datetime
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import settings
from app.services.totals import format_amount, to_decimal

logger = logging.getLogger(__name__)

# Path alle cartelle templates
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TEMPLATES_DIR = os.path.join(BASE_DIR, "templates")


# Lazy import of weasyprint to avoid startup errors if GTK libraries aren't available
def _get_weasyprint():
    """Lazy import of weasyprint to handle missing system libraries gracefully."""
    try:
        from weasyprint import CSS, HTML
        return HTML, CSS
    except OSError as e:
        raise RuntimeError(
            "WeasyPrint dependencies not found. Please install Pango/GTK libraries"
        ) from e


def _format_date(value: Any) -> str:
    """Data in formato gg/mm/aaaa; accetta date o stringhe ISO."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%d/%m/%Y")


def _field(invoice: Any, name: str, default: Any = None) -> Any:
    if isinstance(invoice, dict):
        return invoice.get(name, default)
    return getattr(invoice, name, default)


class PdfService:
    """
    Genera il documento di una fattura da template HTML/CSS.

    Accetta sia un Invoice ORM (con righe caricate) sia il dizionario
    restituito dall'API, così il client di presentazione riusa il template.
    """

    def __init__(self, templates_dir: str = TEMPLATES_DIR):
        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["money"] = lambda v: format_amount(v, settings.currency)
        self.env.filters["qty"] = lambda v: f"{to_decimal(v):.3f}"
        self.env.filters["fr_date"] = _format_date

    def build_context(
        self,
        invoice: Any,
        printed_on: Optional[date] = None,
        printed_by: Optional[str] = None,
    ) -> dict[str, Any]:
        """Contesto del template: intestazione azienda, fattura e piè di pagina."""
        return {
            # Dati azienda (da settings)
            "company_name": settings.invoice_company_name,
            "company_address": settings.invoice_address,
            "company_phone": settings.invoice_phone,
            "company_tax_id": settings.invoice_tax_id,
            "logo_path": settings.invoice_logo_path,

            # Fattura
            "invoice": invoice,
            "items": list(_field(invoice, "items", None) or []),
            "with_tva": bool(_field(invoice, "with_tva", True)),
            "vat_percent": int(settings.vat_rate * 100),
            "has_discount": to_decimal(_field(invoice, "total_discount", 0)) > 0,

            # Piè di pagina
            "printed_on": printed_on or date.today(),
            "printed_by": printed_by if printed_by is not None else settings.invoice_printed_by,
        }

    def render_invoice_html(
        self,
        invoice: Any,
        printed_on: Optional[date] = None,
        printed_by: Optional[str] = None,
    ) -> str:
        """
        Renderizza l'HTML della fattura.

        Args:
            invoice: Invoice ORM o dizionario con gli stessi campi
            printed_on: Data di stampa (default: oggi)
            printed_by: Utente riportato nel piè di pagina

        Returns:
            str: HTML completo
        """
        template = self.env.get_template("invoice_template.html")
        return template.render(self.build_context(invoice, printed_on, printed_by))

    def generate_invoice_pdf(
        self,
        invoice: Any,
        printed_on: Optional[date] = None,
        printed_by: Optional[str] = None,
    ) -> bytes:
        """
        Genera il PDF di una fattura.

        Returns:
            bytes: PDF binario pronto per il download
        """
        # Lazy import weasyprint
        HTML, CSS = _get_weasyprint()

        html_out = self.render_invoice_html(invoice, printed_on, printed_by)
        css = CSS(filename=os.path.join(self.templates_dir, "invoice_style.css"))

        return HTML(string=html_out, base_url=self.templates_dir).write_pdf(stylesheets=[css])


__all__ = ["PdfService", "TEMPLATES_DIR"]
