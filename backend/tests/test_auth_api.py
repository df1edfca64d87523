"""
Test API per registrazione, login, profilo, cambio password e logout.
"""

from conftest import auth_headers, register_user


class TestRegisterAndLogin:
    """Flusso registrazione → login → /auth/me."""

    def test_register_login_me(self, client):
        """Test alice si registra, fa login e /auth/me restituisce il ruolo user."""
        registered = register_user(client, "alice", "alice@x.com", "secret1")
        assert registered["success"] is True
        assert registered["user"]["role"] == "user"
        assert "password_hash" not in registered["user"]

        response = client.post("/api/auth/login", json={"username": "alice", "password": "secret1"})
        assert response.status_code == 200
        token = response.json()["token"]

        me = client.get("/api/auth/me", headers=auth_headers(token))
        assert me.status_code == 200
        assert me.json()["username"] == "alice"
        assert me.json()["role"] == "user"

    def test_login_with_email(self, client):
        """Test login con email al posto dello username."""
        register_user(client)

        response = client.post("/api/auth/login", json={"email": "ALICE@x.com", "password": "secret1"})

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"

    def test_wrong_password_and_unknown_user_same_message(self, client):
        """Test credenziali errate: 401 con lo stesso messaggio."""
        register_user(client)

        wrong = client.post("/api/auth/login", json={"username": "alice", "password": "nope123"})
        unknown = client.post("/api/auth/login", json={"username": "bob", "password": "nope123"})

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"]
        assert wrong.json()["success"] is False
        assert wrong.headers["www-authenticate"] == "Bearer"

    def test_duplicate_username_rejected(self, client):
        """Test username già registrato → 400 DUPLICATE_RESOURCE."""
        register_user(client)

        response = client.post(
            "/api/auth/register",
            json={"username": "Alice", "email": "other@x.com", "password": "secret1"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "DUPLICATE_RESOURCE"

    def test_duplicate_email_rejected(self, client):
        """Test email già registrata → 400."""
        register_user(client)

        response = client.post(
            "/api/auth/register",
            json={"username": "alice2", "email": "alice@x.com", "password": "secret1"},
        )

        assert response.status_code == 400

    def test_short_password_rejected(self, client):
        """Test password di 5 caratteri → 400 VALIDATION_ERROR."""
        response = client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "bob@x.com", "password": "12345"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_invalid_email_rejected(self, client):
        """Test email malformata → 400 dal validatore della richiesta."""
        response = client.post(
            "/api/auth/register",
            json={"username": "bob", "email": "not-an-email", "password": "secret1"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestCurrentUser:
    """Tests per /auth/me con token mancanti o invalidi."""

    def test_me_without_token(self, client):
        """Test nessun token → 401."""
        assert client.get("/api/auth/me").status_code == 401

    def test_me_with_invalid_token(self, client):
        """Test token invalido → 401."""
        response = client.get("/api/auth/me", headers=auth_headers("garbage"))

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHENTICATED"

    def test_update_profile(self, client, user_headers):
        """Test modifica username ed email del proprio profilo."""
        response = client.put(
            "/api/auth/me",
            json={"username": "alice_b", "email": "Alice.B@x.com"},
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.json()["username"] == "alice_b"
        assert response.json()["email"] == "alice.b@x.com"

    def test_update_profile_duplicate(self, client, user_headers):
        """Test profilo con username di un altro utente → 400."""
        register_user(client, "bob", "bob@x.com")

        response = client.put("/api/auth/me", json={"username": "bob"}, headers=user_headers)

        assert response.status_code == 400


class TestChangePassword:
    """Tests per il cambio password."""

    def test_change_password(self, client, user_headers):
        """Test cambio password: la nuova funziona, la vecchia no."""
        response = client.put(
            "/api/auth/change-password",
            json={"current_password": "secret1", "new_password": "secret2"},
            headers=user_headers,
        )
        assert response.status_code == 200

        old = client.post("/api/auth/login", json={"username": "alice", "password": "secret1"})
        new = client.post("/api/auth/login", json={"username": "alice", "password": "secret2"})
        assert old.status_code == 401
        assert new.status_code == 200

    def test_wrong_current_password_keeps_hash(self, client, user_headers):
        """Test password attuale errata → 400 e password invariata."""
        response = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "wrong1", "newPassword": "secret2"},
            headers=user_headers,
        )
        assert response.status_code == 400

        login = client.post("/api/auth/login", json={"username": "alice", "password": "secret1"})
        assert login.status_code == 200

    def test_new_password_too_short(self, client, user_headers):
        """Test nuova password troppo corta → 400."""
        response = client.put(
            "/api/auth/change-password",
            json={"current_password": "secret1", "new_password": "abc"},
            headers=user_headers,
        )

        assert response.status_code == 400

    def test_new_password_equal_to_current(self, client, user_headers):
        """Test nuova password uguale all'attuale → 400."""
        response = client.put(
            "/api/auth/change-password",
            json={"current_password": "secret1", "new_password": "secret1"},
            headers=user_headers,
        )

        assert response.status_code == 400


class TestLogout:
    """Tests per il logout."""

    def test_logout_revokes_token(self, client, user_token):
        """Test dopo il logout il token non è più accettato."""
        headers = auth_headers(user_token)

        response = client.post("/api/auth/logout", headers=headers)

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_logout_other_tokens_still_valid(self, client, user_token):
        """Test il logout revoca solo il token usato."""
        other = client.post(
            "/api/auth/login", json={"username": "alice", "password": "secret1"}
        ).json()["token"]

        client.post("/api/auth/logout", headers=auth_headers(user_token))

        assert client.get("/api/auth/me", headers=auth_headers(other)).status_code == 200

    def test_logout_always_succeeds(self, client):
        """Test logout senza token o con token invalido risponde comunque 200."""
        assert client.post("/api/auth/logout").status_code == 200
        assert client.post("/api/auth/logout", headers=auth_headers("garbage")).status_code == 200
