import threading

import pytest

from services.tiers import SubscriptionTier

PAYMENT_ENV = (
    "STRIPE_PUBLIC_KEY",
    "STRIPE_SECRET_KEY",
    "PRICE_BASIC",
    "PRICE_PRO",
    "PRICE_POWER",
    "APP_BASE_URL",
    "CHECKOUT_API_URL",
    "CHECKOUT_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_payment_env(monkeypatch):
    """Config is read env-first; start every test from a blank slate."""
    for key in PAYMENT_ENV:
        monkeypatch.delenv(key, raising=False)


class FakeGateway:
    """Records calls; returns `payload` or raises `error`. Optional gate blocks the call."""

    def __init__(self, payload=None, error=None, gate: threading.Event | None = None):
        self.payload = payload if payload is not None else {}
        self.error = error
        self.gate = gate
        self.calls: list[SubscriptionTier] = []

    def create_checkout_session(self, tier):
        self.calls.append(tier)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.payload


class RecordingMetadata:
    def __init__(self):
        self.calls = []

    def set_title(self, title):
        self.calls.append(("title", title))

    def set_description(self, description):
        self.calls.append(("description", description))

    def set_structured_data(self, node_id, data):
        self.calls.append(("structured_data", node_id, data))


@pytest.fixture
def fake_gateway_factory():
    return FakeGateway


@pytest.fixture
def recording_metadata():
    return RecordingMetadata()


@pytest.fixture(scope="session")
def log_dir(tmp_path_factory):
    return str(tmp_path_factory.mktemp("logs"))


@pytest.fixture
def app(log_dir):
    from app import create_app, db

    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "LOG_DIR": log_dir,
        "STRIPE_PUBLIC_KEY": "",
        "STRIPE_SECRET_KEY": "",
        "CHECKOUT_API_URL": "",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    from app import db
    from models import User

    with app.app_context():
        u = User(username="ada", email="ada@example.com")
        u.set_password("correct horse")
        db.session.add(u)
        db.session.commit()
        return u.id


@pytest.fixture
def logged_in(client, user):
    resp = client.post(
        "/auth/login",
        data={"username_or_email": "ada", "password": "correct horse"},
    )
    assert resp.status_code == 302
    return client
