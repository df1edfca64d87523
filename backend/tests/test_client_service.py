"""
Unit tests per ClientService con sessione mock.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import DuplicateError
from app.schemas.client import ClientCreate
from app.services.client_service import ClientService


class TestClientNumberRace:
    """Due richieste concorrenti superano entrambe il controllo preventivo."""

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_duplicate(self, mock_db, client_payload):
        """Test IntegrityError al flush → DuplicateError e rollback."""
        # Il controllo preventivo non trova duplicati
        mock_db.execute.return_value.first.return_value = None
        mock_db.flush.side_effect = IntegrityError("INSERT INTO clients", {}, Exception("UNIQUE"))

        with pytest.raises(DuplicateError) as exc_info:
            await ClientService().create(mock_db, ClientCreate(**client_payload))

        assert exc_info.value.status_code == 400
        assert exc_info.value.extra == {"field": "number"}
        mock_db.add.assert_called_once()
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_precheck_finds_duplicate(self, mock_db, client_payload):
        """Test numero già presente → DuplicateError senza scrittura."""
        mock_db.execute.return_value.first.return_value = ("existing-id",)

        with pytest.raises(DuplicateError):
            await ClientService().create(mock_db, ClientCreate(**client_payload))

        mock_db.add.assert_not_called()
        mock_db.flush.assert_not_awaited()
