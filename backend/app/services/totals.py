"""
Calcolo degli importi della fattura
Progetto: Invoice Manager (Gestionale Fatture)

Funzioni pure usate sia dal ledger in scrittura sia dall'anteprima
lato client, così le due viste non possono divergere.

Regole:
- total_price riga = quantity × unit_price
- total_ttc = somma dei total_price
- total_ht = total_ttc / (1 + vat_rate) se with_tva, altrimenti total_ttc
- total_tva = total_ttc - total_ht
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Union

# 3 decimali: il dinaro tunisino è diviso in millimes
MONEY_QUANT = Decimal("0.001")
DEFAULT_VAT_RATE = Decimal("0.19")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Converte un numero in Decimal passando da str per evitare errori binari."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Arrotonda un importo a 3 decimali (half-up)."""
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def line_total(quantity: Number, unit_price: Number) -> Decimal:
    """Importo di una riga: quantity × unit_price."""
    return round_money(to_decimal(quantity) * to_decimal(unit_price))


@dataclass(frozen=True)
class InvoiceTotals:
    """Importi derivati dalle righe di una fattura."""

    total_ht: Decimal
    total_tva: Decimal
    total_ttc: Decimal


def _item_values(item: Any) -> tuple[Number, Number]:
    if isinstance(item, Mapping):
        quantity = item.get("quantity")
        unit_price = item.get("unit_price", item.get("unitPrice"))
    else:
        quantity = item.quantity
        unit_price = item.unit_price
    return quantity, unit_price


def compute_totals(
    items: Iterable[Any],
    with_tva: bool = True,
    vat_rate: Number = DEFAULT_VAT_RATE,
) -> InvoiceTotals:
    """
    Calcola gli importi della fattura a partire dalle righe.

    Gli importi eventualmente presenti sulle righe (total_price) vengono
    ignorati e ricalcolati da quantity e unit_price.

    Args:
        items: Righe (oggetti con quantity/unit_price oppure dict)
        with_tva: Se True scorpora la TVA dal totale TTC
        vat_rate: Aliquota TVA come frazione (0.19 = 19%)

    Returns:
        InvoiceTotals con total_ht, total_tva e total_ttc arrotondati
    """
    total_ttc = Decimal("0")
    for item in items:
        quantity, unit_price = _item_values(item)
        total_ttc += line_total(quantity, unit_price)
    total_ttc = round_money(total_ttc)

    if with_tva:
        total_ht = round_money(total_ttc / (Decimal("1") + to_decimal(vat_rate)))
    else:
        total_ht = total_ttc

    return InvoiceTotals(
        total_ht=total_ht,
        total_tva=total_ttc - total_ht,
        total_ttc=total_ttc,
    )


def format_amount(value: Number, currency: str = "TND") -> str:
    """Formatta un importo con 3 decimali e la sigla valuta (es. '20.000 TND')."""
    amount = round_money(to_decimal(value))
    return f"{amount:.3f} {currency}".strip()


__all__ = [
    "DEFAULT_VAT_RATE",
    "InvoiceTotals",
    "compute_totals",
    "format_amount",
    "line_total",
    "round_money",
    "to_decimal",
]
