"""
Unit tests per InvoiceService con sessione mock.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError, ValidationError
from app.schemas.invoice import InvoiceCreate, InvoiceItemIn
from app.services.invoice_service import InvoiceService


def make_item(quantity, unit_price="1", designation="Cheese") -> InvoiceItemIn:
    return InvoiceItemIn(
        designation=designation,
        quantity=Decimal(str(quantity)),
        unit_price=Decimal(str(unit_price)),
    )


class TestInvoiceItemsValidation:
    """Validazione delle righe fattura."""

    def test_build_items_computes_line_totals(self):
        """Test le righe ricevono posizione e importo calcolato."""
        items = InvoiceService._build_items([make_item(2, "10"), make_item("0.5", "1.25", "Lben")])

        assert [i.position for i in items] == [0, 1]
        assert items[0].total_price == Decimal("20.000")
        assert items[1].total_price == Decimal("0.625")

    def test_build_items_rejects_empty(self):
        """Test nessuna riga → ValidationError."""
        with pytest.raises(ValidationError, match="almeno una riga"):
            InvoiceService._build_items([])

    def test_error_reports_row(self):
        """Test l'errore indica la riga non valida."""
        with pytest.raises(ValidationError) as exc_info:
            InvoiceService._build_items([make_item(1), make_item(0)])

        assert exc_info.value.extra == {"item": 1}

    def test_quantity_rounding_to_zero_rejected(self):
        """Test quantità che arrotondata a 3 decimali vale zero → ValidationError."""
        with pytest.raises(ValidationError, match="maggiore di zero"):
            InvoiceService._build_items([make_item("0.0004", "10")])

    def test_quantity_rounded_before_check(self):
        """Test 0.0005 arrotonda a 0.001 e viene accettata."""
        items = InvoiceService._build_items([make_item("0.0005", "1000")])

        assert items[0].quantity == Decimal("0.001")
        assert items[0].total_price == Decimal("1.000")

    @pytest.mark.parametrize(
        "quantity, unit_price",
        [
            ("1e30", "1"),
            ("1", "1e12"),
            ("99999999", "99999999"),
        ],
    )
    def test_amounts_out_of_range(self, quantity, unit_price):
        """Test valori oltre Numeric(14, 3) → ValidationError, non InvalidOperation."""
        with pytest.raises(ValidationError, match="fuori dall'intervallo") as exc_info:
            InvoiceService._build_items([make_item(quantity, unit_price)])

        assert exc_info.value.extra == {"item": 0}

    def test_non_negative_out_of_range(self):
        """Test remise enorme → ValidationError."""
        with pytest.raises(ValidationError):
            InvoiceService._non_negative(Decimal("1e30"), "La remise")

    def test_non_negative_rounds(self):
        """Test remise arrotondata a 3 decimali."""
        assert InvoiceService._non_negative(Decimal("1.2345"), "La remise") == Decimal("1.235")


class TestInvoiceNumbering:
    """Numerazione progressiva YYYY/NNNN."""

    @pytest.mark.asyncio
    async def test_first_number_of_year(self, mock_db):
        """Test nessuna fattura nell'anno → 0001."""
        mock_db.get_bind.return_value.dialect.name = "sqlite"
        mock_db.execute.return_value.scalar_one_or_none.return_value = None

        number = await InvoiceService()._generate_invoice_number(mock_db, date(2025, 6, 1))

        assert number == "2025/0001"

    @pytest.mark.asyncio
    async def test_next_number(self, mock_db):
        """Test ultimo numero + 1."""
        mock_db.get_bind.return_value.dialect.name = "sqlite"
        mock_db.execute.return_value.scalar_one_or_none.return_value = "2025/0041"

        number = await InvoiceService()._generate_invoice_number(mock_db, date(2025, 6, 1))

        assert number == "2025/0042"

    @pytest.mark.asyncio
    async def test_limit_reached(self, mock_db):
        """Test oltre 9999 fatture annue → ConflictError."""
        mock_db.get_bind.return_value.dialect.name = "sqlite"
        mock_db.execute.return_value.scalar_one_or_none.return_value = "2025/9999"

        with pytest.raises(ConflictError):
            await InvoiceService()._generate_invoice_number(mock_db, date(2025, 6, 1))

    @pytest.mark.asyncio
    async def test_postgres_takes_advisory_lock(self, mock_db):
        """Test su PostgreSQL viene preso il lock prima della lettura."""
        mock_db.get_bind.return_value.dialect.name = "postgresql"
        mock_db.execute.return_value.scalar_one_or_none.return_value = None

        await InvoiceService()._generate_invoice_number(mock_db, date(2025, 6, 1))

        assert mock_db.execute.await_count == 2
        lock_sql = str(mock_db.execute.await_args_list[0].args[0])
        assert "pg_advisory_xact_lock" in lock_sql


class TestInvoiceNumberRace:
    """Numero fattura già assegnato da una richiesta concorrente."""

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_conflict(self, mock_db):
        """Test IntegrityError al flush → ConflictError e rollback."""
        mock_db.get_bind.return_value.dialect.name = "sqlite"
        mock_db.execute.return_value.scalar_one_or_none.return_value = "2025/0006"
        mock_db.flush.side_effect = IntegrityError("INSERT INTO invoices", {}, Exception("UNIQUE"))
        data = InvoiceCreate(
            client_name="Épicerie Centrale",
            client_number="100",
            client_address="Rue de Tunis 5",
            client_tax_id="1234567/A",
            date=date(2025, 3, 14),
            items=[make_item(2, "10")],
        )

        with pytest.raises(ConflictError, match="2025/0007"):
            await InvoiceService().create(mock_db, data)

        mock_db.add.assert_called_once()
        mock_db.rollback.assert_awaited_once()
