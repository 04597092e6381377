from conftest import API, auth


class TestRegistration:
    def test_register_returns_token(self, client):
        r = client.post(f"{API}/users", json={
            "name": "Ada",
            "email": "ada@example.com",
            "password": "secret123",
        })
        assert r.status_code == 200
        token = r.json()["token"]

        r = client.get(f"{API}/auth", headers=auth(token))
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Ada"
        assert data["email"] == "ada@example.com"
        assert data["avatar"]  # default avatar

    def test_duplicate_email_rejected(self, client):
        body = {"name": "Ada", "email": "ada@example.com", "password": "secret123"}
        client.post(f"{API}/users", json=body)
        r = client.post(f"{API}/users", json={**body, "email": "ADA@example.com"})
        assert r.status_code == 409
        assert r.json() == {"detail": "User already exists", "code": "CONFLICT"}

    def test_short_password_rejected(self, client):
        r = client.post(f"{API}/users", json={
            "name": "Ada",
            "email": "ada@example.com",
            "password": "123",
        })
        assert r.status_code == 400

    def test_invalid_email_rejected(self, client):
        r = client.post(f"{API}/users", json={
            "name": "Ada",
            "email": "not-an-email",
            "password": "secret123",
        })
        assert r.status_code == 400


class TestLogin:
    def _register(self, client):
        client.post(f"{API}/users", json={
            "name": "Ada",
            "email": "ada@example.com",
            "password": "secret123",
        })

    def test_login(self, client):
        self._register(client)
        r = client.post(f"{API}/auth", json={"email": "ada@example.com", "password": "secret123"})
        assert r.status_code == 200
        assert client.get(f"{API}/auth", headers=auth(r.json()["token"])).status_code == 200

    def test_wrong_password(self, client):
        self._register(client)
        r = client.post(f"{API}/auth", json={"email": "ada@example.com", "password": "wrong-pass"})
        assert r.status_code == 401

    def test_unknown_email(self, client):
        r = client.post(f"{API}/auth", json={"email": "nobody@example.com", "password": "secret123"})
        assert r.status_code == 401

    def test_missing_token(self, client):
        assert client.get(f"{API}/auth").status_code == 401

    def test_garbage_token(self, client):
        assert client.get(f"{API}/auth", headers=auth("not.a.jwt")).status_code == 401

    def test_expired_token(self, client):
        from app.utils.security import create_access_token

        self._register(client)
        r = client.post(f"{API}/auth", json={"email": "ada@example.com", "password": "secret123"})
        user_id = client.get(f"{API}/auth", headers=auth(r.json()["token"])).json()["id"]
        token = create_access_token(user_id, expires_in=-10)
        assert client.get(f"{API}/auth", headers=auth(token)).status_code == 401
