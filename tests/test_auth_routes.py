from hostelmart.auth import TokenService
from hostelmart.exceptions import TokenError
from hostelmart.models import User

from conftest import PASSWORD, registration


def test_register_returns_account_without_digest(client):
    res = client.post("/api/auth/register", json=registration())

    assert res.status_code == 201, res.text
    body = res.json()
    assert body["email"] == "asha@campus.edu"
    assert body["roomNumber"] == "B-214"
    assert body["whatsappNumber"] == "919876543210"
    assert "password" not in body
    assert "passwordHash" not in body
    assert "password_hash" not in body


def test_register_sets_session_cookie(client):
    res = client.post("/api/auth/register", json=registration())

    header = res.headers["set-cookie"].lower()
    assert header.startswith("auth_token=")
    assert "httponly" in header
    assert "max-age=604800" in header

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == "asha@campus.edu"
    assert me.json()["id"] == res.json()["id"]


def test_register_accepts_snake_case_fields(client):
    body = registration()
    body["room_number"] = body.pop("roomNumber")
    body["whatsapp_number"] = body.pop("whatsappNumber")

    res = client.post("/api/auth/register", json=body)

    assert res.status_code == 201, res.text


def test_register_duplicate_email_conflicts(client, app, register, make_client):
    register()

    res = make_client().post("/api/auth/register", json=registration(name="Someone Else"))

    assert res.status_code == 409
    assert res.json()["error"] == "User already exists"
    with app.state.session_factory() as db:
        assert db.query(User).filter(User.email == "asha@campus.edu").count() == 1


def test_register_missing_fields(client):
    body = registration()
    del body["hostel"]

    res = client.post("/api/auth/register", json=body)

    assert res.status_code == 400
    assert res.json()["error"] == "Missing required fields"
    assert "hostel" in res.json()["details"]["fields"]


def test_register_empty_field_is_missing(client):
    res = client.post("/api/auth/register", json=registration(name=""))

    assert res.status_code == 400


def test_register_invalid_email(client):
    res = client.post("/api/auth/register", json=registration(email="not-an-email"))

    assert res.status_code == 400


def test_login_success_sets_cookie(client, register, make_client):
    register()
    other = make_client()

    res = other.post("/api/auth/login", json={"email": "asha@campus.edu", "password": PASSWORD})

    assert res.status_code == 200, res.text
    assert res.json()["name"] == "Asha Verma"
    assert "passwordHash" not in res.json()
    assert other.get("/api/auth/me").status_code == 200


def test_login_wrong_password(client, register, make_client):
    register()

    res = make_client().post("/api/auth/login", json={"email": "asha@campus.edu", "password": "wrong"})

    assert res.status_code == 401
    assert res.json()["error"] == "Invalid email or password"


def test_login_unknown_email_same_error(client):
    res = client.post("/api/auth/login", json={"email": "nobody@campus.edu", "password": PASSWORD})

    assert res.status_code == 401
    assert res.json()["error"] == "Invalid email or password"


def test_login_missing_password(client):
    res = client.post("/api/auth/login", json={"email": "asha@campus.edu"})

    assert res.status_code == 400


def test_logout_clears_cookie(client, seller):
    res = client.post("/api/auth/logout")

    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert client.get("/api/auth/me").status_code == 401


def test_logout_without_session_is_fine(client):
    assert client.post("/api/auth/logout").status_code == 200


def test_me_without_session(client):
    res = client.get("/api/auth/me")

    assert res.status_code == 401
    assert res.json()["code"] == "AUTH_FAILED"


def test_token_failure_is_500_without_cookie(client, monkeypatch):
    def _fail(self, claims):
        raise TokenError()

    monkeypatch.setattr(TokenService, "issue", _fail)

    res = client.post("/api/auth/register", json=registration())

    assert res.status_code == 500
    assert res.json()["code"] == "TOKEN_FAILED"
    assert "set-cookie" not in res.headers
