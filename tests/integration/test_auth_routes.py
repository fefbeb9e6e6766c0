from bundlestore.utils.security import COOKIE_NAME

def test_signup_sets_session_cookie(client, user_store):
    r = client.post("/api/v1/auth/signup", json={"email": "ama@example.com", "password": "secret1", "full_name": "Ama"})
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ama@example.com"
    assert COOKIE_NAME in r.cookies

def test_signup_duplicate_email(client, user_store):
    user_store.add("ama@example.com", "secret1")
    r = client.post("/api/v1/auth/signup", json={"email": "ama@example.com", "password": "secret1"})
    assert r.status_code == 400
    assert r.json()["detail"] == "User with this email already exists"

def test_signup_short_password(client):
    r = client.post("/api/v1/auth/signup", json={"email": "ama@example.com", "password": "123"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Password must be at least 6 characters"

def test_signup_invalid_email(client):
    r = client.post("/api/v1/auth/signup", json={"email": "not-an-email", "password": "secret1"})
    assert r.status_code == 422

def test_login_and_me_with_bearer(client, user_store):
    user_store.add("ama@example.com", "secret1", "Ama")
    r = client.post("/api/v1/auth/login", json={"email": "ama@example.com", "password": "secret1"})
    assert r.status_code == 200
    token = r.json()["access_token"]
    client.cookies.clear()

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ama@example.com"
    assert "password_hash" not in me.json()

def test_login_failure(client, user_store):
    user_store.add("ama@example.com", "secret1")
    r = client.post("/api/v1/auth/login", json={"email": "ama@example.com", "password": "wrong-one"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid email or password"

def test_me_requires_session(client):
    assert client.get("/api/v1/auth/me").status_code == 401

def test_profile_requires_session(client):
    r = client.put("/api/v1/auth/profile", json={"full_name": "Someone"})
    assert r.status_code == 401

def test_password_update_with_bearer(client, user_store):
    user_store.add("ama@example.com", "secret1")
    token = client.post("/api/v1/auth/login", json={"email": "ama@example.com", "password": "secret1"}).json()["access_token"]
    client.cookies.clear()
    headers = {"Authorization": f"Bearer {token}"}

    bad = client.put("/api/v1/auth/password", json={"current_password": "nope", "new_password": "newsecret"}, headers=headers)
    short = client.put("/api/v1/auth/password", json={"current_password": "secret1", "new_password": "12"}, headers=headers)
    ok = client.put("/api/v1/auth/password", json={"current_password": "secret1", "new_password": "newsecret"}, headers=headers)

    assert (bad.status_code, bad.json()["detail"]) == (400, "Current password is incorrect")
    assert (short.status_code, short.json()["detail"]) == (400, "Password must be at least 6 characters")
    assert ok.status_code == 200

def test_logout_clears_cookie(client):
    r = client.post("/api/v1/auth/logout")
    assert r.status_code == 200
    assert COOKIE_NAME in r.headers.get("set-cookie", "")

def test_signup_password_too_long(client):
    r = client.post("/api/v1/auth/signup", json={"email": "ama@example.com", "password": "x" * 80})
    assert r.status_code == 400
    assert r.json()["detail"] == "Password must be at most 72 bytes"
