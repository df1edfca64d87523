"""
Livello di presentazione: sessione esplicita, client API e anteprima fatture.
"""

from app.presentation.api_client import ApiError, InvoiceApiClient, SessionExpired
from app.presentation.preview import preview_totals, render_invoice_html
from app.presentation.session import Session

__all__ = [
    "Session",
    "InvoiceApiClient",
    "ApiError",
    "SessionExpired",
    "preview_totals",
    "render_invoice_html",
]
