"""
Unit tests per UserService con sessione mock.
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import DuplicateError, NotFoundError, ValidationError
from app.models.user import UserRole
from app.schemas.user import UserUpdate
from app.services.auth_service import flush_user
from app.services.user_service import UserService


class TestUserSelfProtection:
    """Un amministratore non può rimuovere il proprio accesso."""

    @pytest.mark.asyncio
    async def test_delete_self(self, mock_db, mock_admin):
        """Test eliminazione del proprio account rifiutata."""
        mock_db.get.return_value = mock_admin

        with pytest.raises(ValidationError):
            await UserService().delete(mock_db, mock_admin, mock_admin.id)

        mock_db.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_deactivate_self(self, mock_db, mock_admin):
        """Test disattivazione del proprio account rifiutata."""
        mock_db.get.return_value = mock_admin

        with pytest.raises(ValidationError):
            await UserService().set_active(mock_db, mock_admin, mock_admin.id, False)

        assert mock_admin.is_active is True

    @pytest.mark.asyncio
    async def test_demote_self(self, mock_db, mock_admin):
        """Test cambio del proprio ruolo rifiutato."""
        mock_db.get.return_value = mock_admin

        with pytest.raises(ValidationError):
            await UserService().update(mock_db, mock_admin, mock_admin.id, UserUpdate(role=UserRole.USER))

        assert mock_admin.role == "admin"

    @pytest.mark.asyncio
    async def test_unknown_user(self, mock_db, mock_admin):
        """Test utente inesistente → NotFoundError."""
        mock_db.get.return_value = None

        with pytest.raises(NotFoundError):
            await UserService().get_by_id(mock_db, uuid.uuid4())




class TestUserUniqueRace:
    """Violazione dell'indice univoco dopo il controllo preventivo."""

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_duplicate(self, mock_db, mock_admin):
        """Test IntegrityError al flush → DuplicateError e rollback."""
        mock_db.flush.side_effect = IntegrityError("INSERT INTO users", {}, Exception("UNIQUE"))

        with pytest.raises(DuplicateError):
            await flush_user(mock_db, mock_admin)

        mock_db.rollback.assert_awaited_once()
