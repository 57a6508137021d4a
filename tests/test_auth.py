import pytest
from sqlmodel import select

from celpip_api.core.exceptions import AuthenticationError, ConflictError
from celpip_api.models.models import User, UserRole
from celpip_api.services import auth_service


def signup(client, api_prefix, email="ana@mail.com", password="secret1", name="Ana"):
    return client.post(f"{api_prefix}/signup", json={"email": email, "password": password, "name": name})


def test_signup_returns_user_without_credentials(client, api_prefix):
    response = signup(client, api_prefix)
    assert response.status_code == 201

    body = response.json()
    assert body["id"].startswith("user-")
    assert body["email"] == "ana@mail.com"
    assert body["role"] == "user"
    assert body["name"] == "Ana"
    assert "password" not in body
    assert "password_hash" not in body


def test_signup_stores_salted_hash(client, api_prefix, session):
    signup(client, api_prefix, email="salt1@mail.com")
    signup(client, api_prefix, email="salt2@mail.com")

    hashes = [user.password_hash for user in session.exec(select(User)).all()]
    assert all(h.startswith("pbkdf2_sha256$") for h in hashes)
    assert "secret1" not in hashes
    # Same password, different salts
    assert hashes[0] != hashes[1]


def test_login_with_valid_credentials(client, api_prefix):
    user_id = signup(client, api_prefix).json()["id"]

    response = client.post(f"{api_prefix}/login", json={"email": "ana@mail.com", "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["id"] == user_id


def test_login_email_is_case_insensitive(client, api_prefix):
    signup(client, api_prefix, email="Ana@Mail.com")

    response = client.post(f"{api_prefix}/login", json={"email": "  ANA@mail.com ", "password": "secret1"})
    assert response.status_code == 200
    assert response.json()["email"] == "ana@mail.com"


def test_login_with_wrong_password(client, api_prefix):
    signup(client, api_prefix)

    response = client.post(f"{api_prefix}/login", json={"email": "ana@mail.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_with_unknown_email(client, api_prefix):
    response = client.post(f"{api_prefix}/login", json={"email": "ghost@mail.com", "password": "secret1"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_duplicate_signup_conflicts(client, api_prefix):
    assert signup(client, api_prefix).status_code == 201

    response = signup(client, api_prefix, email="ANA@mail.com", password="another1")
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already exists"


@pytest.mark.parametrize("payload", [
    {"email": "not-an-email", "password": "secret1"},
    {"email": "ana@mail.com", "password": "123"},
    {"password": "secret1"},
])
def test_signup_rejects_invalid_payload(client, api_prefix, payload):
    assert client.post(f"{api_prefix}/signup", json=payload).status_code == 422


def test_legacy_plaintext_credential_is_upgraded_on_login(client, api_prefix, session):
    session.add(User(id="admin-1", email="admin@celprep.com", password_hash="admin123",
                     role=UserRole.ADMIN, name="Admin User"))
    session.commit()

    response = client.post(f"{api_prefix}/login", json={"email": "admin@celprep.com", "password": "admin123"})
    assert response.status_code == 200
    assert response.json()["role"] == "admin"

    session.expire_all()
    upgraded = session.get(User, "admin-1")
    assert upgraded.password_hash.startswith("pbkdf2_sha256$")
    assert auth_service.verify_password("admin123", upgraded.password_hash) == (True, False)

    # Still works with the upgraded credential
    again = client.post(f"{api_prefix}/login", json={"email": "admin@celprep.com", "password": "admin123"})
    assert again.status_code == 200


def test_legacy_credential_with_wrong_password_is_not_upgraded(client, api_prefix, session):
    session.add(User(id="user-old", email="old@mail.com", password_hash="plainpass"))
    session.commit()

    response = client.post(f"{api_prefix}/login", json={"email": "old@mail.com", "password": "plainpas"})
    assert response.status_code == 401

    session.expire_all()
    assert session.get(User, "user-old").password_hash == "plainpass"


def test_verify_password_rejects_malformed_hash():
    assert auth_service.verify_password("secret1", "pbkdf2_sha256$oops") == (False, False)


def test_hash_round_trip():
    stored = auth_service.hash_password("secret1", iterations=1000)
    assert stored.startswith("pbkdf2_sha256$1000$")
    assert auth_service.verify_password("secret1", stored) == (True, False)
    assert auth_service.verify_password("secret2", stored) == (False, False)


def test_register_and_authenticate_services(session):
    user = auth_service.register(session, " Bo@Mail.com ", "secret1", "Bo")
    assert user.email == "bo@mail.com"
    assert user.role == UserRole.USER

    assert auth_service.authenticate(session, "bo@mail.com", "secret1").id == user.id
    with pytest.raises(AuthenticationError):
        auth_service.authenticate(session, "bo@mail.com", "nope")
    with pytest.raises(ConflictError):
        auth_service.register(session, "bo@mail.com", "secret2")
