"""
Test API per la gestione utenti (solo amministratori).
"""

from conftest import ADMIN_USERNAME, auth_headers, register_user


class TestUsersAccess:
    """Autorizzazione sugli endpoint /users."""

    def test_user_role_forbidden(self, client, user_headers):
        """Test utente con ruolo user → 403."""
        response = client.get("/api/users", headers=user_headers)

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_without_token(self, client):
        """Test senza token → 401."""
        assert client.get("/api/users").status_code == 401

    def test_admin_lists_users(self, client, admin_headers):
        """Test admin vede la lista senza hash delle password."""
        register_user(client)

        response = client.get("/api/users", headers=admin_headers)

        assert response.status_code == 200
        usernames = {u["username"] for u in response.json()}
        assert usernames == {ADMIN_USERNAME, "alice"}
        assert all("password_hash" not in u for u in response.json())


class TestUsersManagement:
    """CRUD e operazioni amministrative."""

    def test_create_user_with_role(self, client, admin_headers):
        """Test l'admin crea un altro admin che può gestire gli utenti."""
        response = client.post(
            "/api/users",
            json={"username": "carla", "email": "carla@x.com", "password": "secret1", "role": "admin"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert response.json()["role"] == "admin"

        token = client.post(
            "/api/auth/login", json={"username": "carla", "password": "secret1"}
        ).json()["token"]
        assert client.get("/api/users", headers=auth_headers(token)).status_code == 200

    def test_create_duplicate(self, client, admin_headers):
        """Test username già esistente → 400."""
        register_user(client)

        response = client.post(
            "/api/users",
            json={"username": "alice", "email": "new@x.com", "password": "secret1"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_RESOURCE"

    def test_create_short_password(self, client, admin_headers):
        """Test password troppo corta → 400."""
        response = client.post(
            "/api/users",
            json={"username": "dino", "email": "dino@x.com", "password": "123"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_update_role(self, client, admin_headers):
        """Test promozione di un utente ad admin."""
        user_id = register_user(client)["user"]["id"]

        response = client.put(f"/api/users/{user_id}", json={"role": "admin"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_reset_password(self, client, admin_headers):
        """Test reset password: l'utente entra con la nuova password."""
        user_id = register_user(client)["user"]["id"]

        response = client.put(
            f"/api/users/{user_id}/reset-password",
            json={"newPassword": "nuova123"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        login = client.post("/api/auth/login", json={"username": "alice", "password": "nuova123"})
        assert login.status_code == 200

    def test_deactivate_blocks_access(self, client, admin_headers):
        """Test utente disattivato: token esistente e login rifiutati."""
        registered = register_user(client)
        user_id = registered["user"]["id"]

        response = client.put(
            f"/api/users/{user_id}/active", json={"isActive": False}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert client.get("/api/auth/me", headers=auth_headers(registered["token"])).status_code == 401
        login = client.post("/api/auth/login", json={"username": "alice", "password": "secret1"})
        assert login.status_code == 401

    def test_delete_user(self, client, admin_headers):
        """Test eliminazione utente."""
        user_id = register_user(client)["user"]["id"]

        assert client.delete(f"/api/users/{user_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/users/{user_id}", headers=admin_headers).status_code == 404

    def test_admin_cannot_delete_self(self, client, admin_headers):
        """Test l'admin non può eliminare il proprio account."""
        admin_id = client.get("/api/auth/me", headers=admin_headers).json()["id"]

        response = client.delete(f"/api/users/{admin_id}", headers=admin_headers)

        assert response.status_code == 400
        assert client.get("/api/auth/me", headers=admin_headers).status_code == 200

    def test_admin_cannot_demote_self(self, client, admin_headers):
        """Test l'admin non può togliersi il ruolo admin."""
        admin_id = client.get("/api/auth/me", headers=admin_headers).json()["id"]

        response = client.put(f"/api/users/{admin_id}", json={"role": "user"}, headers=admin_headers)

        assert response.status_code == 400
