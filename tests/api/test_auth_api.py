def login(client, email="admin@example.com", password="secret-pw"):
    return client.post("/api/auth/login", data={"username": email, "password": password})


def test_login_returns_token_and_cookie(client, admin_user):
    response = login(client)

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert "access_token" in response.cookies


def test_cookie_session_resolves_actor(client, admin_user):
    login(client)

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json() == {
        "id": admin_user.id,
        "role": "admin",
        "email": "admin@example.com",
        "authenticated": True,
    }


def test_bearer_header_resolves_actor(client, author_user):
    token = login(client, "author@example.com").json()["access_token"]
    client.cookies.clear()

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["role"] == "author"


def test_wrong_password(client, admin_user):
    response = login(client, password="wrong")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_unknown_user(client):
    assert login(client, email="ghost@example.com").status_code == 401


def test_disabled_user_cannot_log_in(client, admin_user, user_repo):
    user_repo.save(admin_user.model_copy(update={"status": "disabled"}))
    assert login(client).status_code == 401


def test_disabled_user_token_is_anonymous(client, author_user, user_repo, auth_headers):
    headers = auth_headers(author_user)
    user_repo.save(author_user.model_copy(update={"status": "disabled"}))

    assert client.get("/api/auth/me", headers=headers).json()["role"] == "anonymous"


def test_logout_clears_cookie(client, admin_user):
    login(client)
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").json()["authenticated"] is False


def test_anonymous_me(client):
    assert client.get("/api/auth/me").json() == {
        "id": None,
        "role": "anonymous",
        "email": None,
        "authenticated": False,
    }


def test_token_signed_with_other_secret_is_anonymous(client, admin_user, settings):
    token = login(client).json()["access_token"]
    client.cookies.clear()
    settings.secret_key = "rotated"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["authenticated"] is False


def test_stale_cookie_falls_back_to_bearer_header(client, author_user):
    token = login(client, "author@example.com").json()["access_token"]
    client.cookies.clear()
    client.cookies.set("access_token", "expired-or-forged")

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["role"] == "author"
    assert me.json()["authenticated"] is True
