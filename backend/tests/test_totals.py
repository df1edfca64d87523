"""
Unit tests per il calcolo degli importi della fattura.
"""

from decimal import Decimal

import pytest

from app.services.totals import (
    InvoiceTotals,
    compute_totals,
    format_amount,
    line_total,
    round_money,
)


class TestLineTotal:
    """Importo di riga = quantità × prezzo unitario."""

    def test_line_total_simple(self):
        """Test 2 × 10.000 = 20.000."""
        assert line_total(2, "10.000") == Decimal("20.000")

    def test_line_total_rounds_half_up(self):
        """Test arrotondamento half-up al millesimo."""
        assert line_total("0.5", "0.001") == Decimal("0.001")

    def test_line_total_avoids_float_errors(self):
        """Test input float convertiti passando da stringa."""
        assert line_total(3, 0.1) == Decimal("0.300")


class TestComputeTotals:
    """Tests per compute_totals."""

    def test_cheese_example_with_tva(self, cheese_items):
        """Test esempio: 2 × 10.000 con TVA → TTC 20.000, HT 16.807."""
        totals = compute_totals(cheese_items, with_tva=True)

        assert totals == InvoiceTotals(
            total_ht=Decimal("16.807"),
            total_tva=Decimal("3.193"),
            total_ttc=Decimal("20.000"),
        )

    def test_without_tva_ht_equals_ttc(self, cheese_items):
        """Test senza TVA: HT = TTC e TVA = 0."""
        totals = compute_totals(cheese_items, with_tva=False)

        assert totals.total_ht == totals.total_ttc == Decimal("20.000")
        assert totals.total_tva == Decimal("0.000")

    def test_ttc_is_sum_of_lines(self):
        """Test TTC = somma delle righe."""
        items = [
            {"quantity": "1.5", "unit_price": "12.400"},
            {"quantity": 3, "unit_price": "0.750"},
            {"quantity": 1, "unitPrice": "5"},
        ]

        totals = compute_totals(items)

        assert totals.total_ttc == Decimal("18.600") + Decimal("2.250") + Decimal("5.000")

    def test_ht_matches_ttc_divided_by_rate(self):
        """Test HT = TTC / 1.19 entro l'arrotondamento."""
        items = [{"quantity": 7, "unit_price": "3.333"}]

        totals = compute_totals(items)

        expected = totals.total_ttc / Decimal("1.19")
        assert abs(totals.total_ht - expected) <= Decimal("0.0005")
        assert totals.total_ht + totals.total_tva == totals.total_ttc

    def test_ignores_submitted_line_totals(self):
        """Test un total_price falso sulla riga non influisce sul calcolo."""
        items = [{"quantity": 2, "unit_price": "10", "total_price": "999"}]

        assert compute_totals(items).total_ttc == Decimal("20.000")

    def test_empty_items(self):
        """Test nessuna riga: tutti gli importi a zero."""
        totals = compute_totals([])

        assert totals.total_ttc == Decimal("0.000")
        assert totals.total_ht == Decimal("0.000")

    def test_custom_vat_rate(self, cheese_items):
        """Test aliquota diversa da quella di default."""
        totals = compute_totals(cheese_items, vat_rate="0.07")

        assert totals.total_ht == Decimal("18.692")


class TestFormatting:
    """Tests per round_money e format_amount."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("1.0005"), Decimal("1.001")),
            (Decimal("1.0004"), Decimal("1.000")),
            (Decimal("16.80672"), Decimal("16.807")),
        ],
    )
    def test_round_money(self, value, expected):
        """Test arrotondamento a 3 decimali."""
        assert round_money(value) == expected

    def test_format_amount(self):
        """Test formato con 3 decimali e valuta."""
        assert format_amount("20") == "20.000 TND"
        assert format_amount(Decimal("16.8067"), "EUR") == "16.807 EUR"
