def test_register_signs_in_and_lands_on_pricing(client):
    resp = client.post(
        "/auth/register",
        data={"username": "grace", "email": "Grace@Example.com", "password": "longenough"},
    )
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/pricing")

    page = client.get("/account").get_data(as_text=True)
    assert "Your account" in page


def test_register_returns_to_subscribe_next(client):
    resp = client.post(
        "/auth/register?next=/subscribe?tier=power",
        data={"username": "grace", "email": "grace@example.com", "password": "longenough"},
    )
    assert resp.headers["Location"].endswith("/subscribe?tier=power")


def test_register_rejects_short_password(client):
    resp = client.post(
        "/auth/register",
        data={"username": "grace", "email": "grace@example.com", "password": "short"},
    )
    assert resp.status_code == 400
    assert "Passwords need at least 8 characters." in resp.get_data(as_text=True)


def test_register_rejects_taken_email(client, user):
    resp = client.post(
        "/auth/register",
        data={"username": "someone", "email": "ada@example.com", "password": "longenough"},
    )
    assert resp.status_code == 400


def test_login_bad_password(client, user):
    resp = client.post("/auth/login", data={"username_or_email": "ada", "password": "nope"})
    assert resp.status_code == 401
    assert "Wrong username/email or password." in resp.get_data(as_text=True)


def test_login_honours_same_host_next(client, user):
    resp = client.post(
        "/auth/login?next=/subscribe?tier=pro",
        data={"username_or_email": "ada@example.com", "password": "correct horse"},
    )
    assert resp.headers["Location"].endswith("/subscribe?tier=pro")


def test_login_ignores_foreign_next(client, user):
    resp = client.post(
        "/auth/login?next=https://evil.example/",
        data={"username_or_email": "ada", "password": "correct horse"},
    )
    assert resp.headers["Location"].endswith("/pricing")


def test_login_form_keeps_next(client):
    body = client.get("/auth/login?next=/subscribe?tier=pro").get_data(as_text=True)
    assert 'value="/subscribe?tier=pro"' in body


def test_account_requires_login(client):
    resp = client.get("/account")
    assert resp.status_code == 302
    assert "/auth/login" in resp.headers["Location"]


def test_pricing_links_to_subscribe(client):
    body = client.get("/pricing").get_data(as_text=True)
    assert "/subscribe?tier=pro" in body
