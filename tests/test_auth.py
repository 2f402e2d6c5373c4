"""Auth and account tests"""
from wellness.models.client import Client
from wellness.models.user import User, UserRole
from tests.conftest import PASSWORD


def test_health_endpoint(test_client):
    """Test health check endpoint"""
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_login_without_credentials(test_client):
    """Test login endpoint without credentials"""
    response = test_client.post("/auth/login", json={})
    assert response.status_code == 422  # Validation error


def test_login_with_invalid_credentials(test_client):
    """Test login with invalid credentials"""
    response = test_client.post(
        "/auth/login",
        json={"email": "nonexistent@example.com", "password": "wrong"}
    )
    assert response.status_code == 401


def test_login_normalizes_email(test_client, client_profile):
    response = test_client.post(
        "/auth/login",
        json={"email": "  Client@Example.com ", "password": PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_login_rejects_inactive_user(test_client, db, client_profile):
    user = db.get(User, client_profile.user_id)
    user.is_active = False
    db.commit()

    response = test_client.post("/auth/login", json={"email": "client@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_login_is_rate_limited(test_client):
    for _ in range(10):
        test_client.post("/auth/login", json={"email": "nobody@example.com", "password": "wrong"})

    response = test_client.post("/auth/login", json={"email": "nobody@example.com", "password": "wrong"})
    assert response.status_code == 429
    assert response.json()["code"] == "RATE_LIMIT_EXCEEDED"


def test_register_creates_client_profile(test_client, db):
    response = test_client.post("/auth/register", json={
        "email": "New.Person@Example.com",
        "password": "longenough",
        "first_name": "New",
        "last_name": "Person",
    })
    assert response.status_code == 201
    token = response.json()["access_token"]

    user = db.query(User).filter(User.email == "new.person@example.com").one()
    assert user.role == UserRole.CLIENT
    client = db.query(Client).filter(Client.user_id == user.id).one()
    assert client.contact_info == [{"type": "email", "value": "new.person@example.com", "primary": True}]

    me = test_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["client_id"] == str(client.id)
    assert me.json()["role"] == "client"


def test_register_duplicate_email(test_client, client_profile):
    response = test_client.post("/auth/register", json={
        "email": "client@example.com",
        "password": "longenough",
        "first_name": "Jane",
        "last_name": "Doe",
    })
    assert response.status_code == 400


def test_register_short_password(test_client):
    response = test_client.post("/auth/register", json={
        "email": "short@example.com",
        "password": "short",
        "first_name": "Short",
        "last_name": "Password",
    })
    assert response.status_code == 422


def test_me_requires_token(test_client):
    assert test_client.get("/auth/me").status_code == 401


def test_me_rejects_garbage_token(test_client):
    response = test_client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_update_profile(test_client, client_headers):
    response = test_client.put("/auth/me/profile", headers=client_headers, json={
        "first_name": "Janet",
        "contact_info": [
            {"type": "phone", "value": " 07700 900123 ", "primary": True},
            {"type": "email", "value": "client@example.com"},
        ],
    })
    assert response.status_code == 200
    body = response.json()
    assert body["first_name"] == "Janet"
    assert body["last_name"] == "Doe"
    assert body["contact_info"][0]["value"] == "07700 900123"


def test_update_profile_rejects_unknown_contact_type(test_client, client_headers):
    response = test_client.put("/auth/me/profile", headers=client_headers, json={
        "contact_info": [{"type": "pager", "value": "1234"}],
    })
    assert response.status_code == 422


def test_profile_needs_client_record(test_client, admin_headers):
    assert test_client.get("/auth/me/profile", headers=admin_headers).status_code == 403
