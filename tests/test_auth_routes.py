from conftest import ADMIN_EMAIL, PASSWORD, register


def test_health_check(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_register_starts_a_session(client):
    resp = register(client, "Newcomer@Example.com")
    assert resp.status_code == 201
    user = resp.get_json()["user"]
    assert user["email"] == "newcomer@example.com"
    assert user["fullName"] == "Test User"
    assert user["isAdmin"] is False

    me = client.get("/api/auth/user")
    assert me.status_code == 200
    assert me.get_json()["user"]["id"] == user["id"]


def test_register_rejects_duplicates_and_bad_input(client):
    register(client, "dupe@example.com")

    duplicate = register(client, "DUPE@example.com")
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"] == "Email already registered"

    bad = client.post("/api/auth/register", json={"email": "not-an-email", "password": "123"})
    assert bad.status_code == 400
    messages = bad.get_json()["messages"]
    assert "email" in messages
    assert "password" in messages


def test_admin_emails_are_promoted_on_registration(client):
    resp = register(client, ADMIN_EMAIL)
    assert resp.get_json()["user"]["isAdmin"] is True
    assert client.get("/api/admin/stats").status_code == 200


def test_login_and_logout(client):
    register(client, "member@example.com")
    client.post("/api/auth/logout")
    assert client.get("/api/auth/user").status_code == 401

    wrong = client.post("/api/auth/login", json={"email": "member@example.com", "password": "nope12345"})
    assert wrong.status_code == 401
    assert wrong.get_json()["error"] == "Invalid email or password"

    missing = client.post("/api/auth/login", json={"email": "member@example.com"})
    assert missing.status_code == 400

    resp = client.post("/api/auth/login", json={"email": "MEMBER@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["lastLoginAt"] is not None
    assert resp.get_json()["unlockedBadges"] == []
    assert client.get("/api/auth/user").status_code == 200


def test_deactivated_account_cannot_log_in(client, admin_client, auth_client):
    admin_client.put(f"/api/admin/users/{auth_client.user_id}", json={"isActive": False})

    resp = client.post("/api/auth/login", json={"email": "learner@example.com", "password": PASSWORD})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Account is deactivated"


def test_update_current_user(auth_client):
    resp = auth_client.put("/api/auth/user", json={"firstName": "Grace", "profileImageUrl": "https://img.example.com/me.png"})
    assert resp.status_code == 200
    user = resp.get_json()["user"]
    assert user["firstName"] == "Grace"
    assert user["lastName"] == "User"
    assert user["profileImageUrl"] == "https://img.example.com/me.png"

    bad = auth_client.put("/api/auth/user", json={"profileImageUrl": "not a url"})
    assert bad.status_code == 400

    # Role flags are not part of the self-service update.
    auth_client.put("/api/auth/user", json={"isAdmin": True})
    assert auth_client.get("/api/admin/stats").status_code == 403

    auth_client.put("/api/auth/user", json={"password": "newsecret1"})
    auth_client.post("/api/auth/logout")
    relogin = auth_client.post("/api/auth/login", json={"email": "learner@example.com", "password": "newsecret1"})
    assert relogin.status_code == 200


def test_unknown_routes_return_json_errors(client):
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False

    resp = client.delete("/api/health")
    assert resp.status_code == 405


def test_register_and_login_reject_non_text_credentials(client):
    resp = client.post("/api/auth/register", json={"email": 123, "password": ["secret123"]})
    assert resp.status_code == 400
    assert set(resp.get_json()["messages"]) >= {"email", "password"}

    register(client, "typed@example.com")
    resp = client.post("/api/auth/login", json={"email": "typed@example.com", "password": 123456})
    assert resp.status_code == 400
    assert "password" in resp.get_json()["messages"]
