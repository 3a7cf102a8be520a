import pytest

from app import create_app
from config import Config
from utils.errors import Unauthorized
from utils.google_auth import GoogleIdentity
from utils.payment_gateway import ProviderCapture

PASSWORD = "pw12345678"


class FakePayPal:
    """Stand-in for PayPalGateway recording every call."""

    def __init__(self):
        self.orders = {}
        self.capture_calls = []
        self.capture_status = "COMPLETED"
        self.capture_error = None
        self.owner_override = None

    def create_order(self, amount, currency, owner_tag):
        order_id = f"ORDER-{len(self.orders) + 1}"
        self.orders[order_id] = {"amount": amount, "currency": currency, "owner_tag": owner_tag}
        return {"id": order_id, "status": "CREATED"}

    def capture_order(self, order_id):
        self.capture_calls.append(order_id)
        if self.capture_error is not None:
            raise self.capture_error
        order = self.orders[order_id]
        return ProviderCapture(
            order_id=order_id,
            status=self.capture_status,
            captured_amount=float(order["amount"]),
            currency=order["currency"],
            owner_tag=self.owner_override or order["owner_tag"],
            raw={"id": order_id},
        )


class FakeGoogle:
    """Stand-in for GoogleTokenVerifier: known tokens map to identities."""

    def __init__(self):
        self.identities = {}

    def add(self, token, subject, email, name="Google User"):
        self.identities[token] = GoogleIdentity(subject, email, True, "test-client", name)

    def verify(self, id_token):
        if id_token not in self.identities:
            raise Unauthorized("Failed to verify Google token")
        return self.identities[id_token]


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        DATA_DIR = tmp_path / "data"
        MAIL_SERVER = "localhost"
        MAIL_OUTBOX_DIR = tmp_path / "outbox"
        EURO_UNIT_PRICE = 1.0
        PAYPAL_CURRENCY = "EUR"
        BOOTSTRAP_FIRST_ADMIN = True

    app = create_app(TestConfig)
    app.extensions["payment_gateway"] = FakePayPal()
    app.extensions["google_verifier"] = FakeGoogle()
    return app


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def paypal(app):
    return app.extensions["payment_gateway"]


@pytest.fixture
def google(app):
    return app.extensions["google_verifier"]


@pytest.fixture
def verified_user(ctx):
    """A registered, verified account (the bootstrap admin, being first)."""
    from services import identity
    user = identity.register("ann@example.com", PASSWORD, "Ann")
    return identity.verify_email(user.verification_token)


@pytest.fixture
def player(ctx, verified_user):
    """A second verified account with the plain user role."""
    from services import identity
    user = identity.register("bob@example.com", PASSWORD, "Bob")
    return identity.verify_email(user.verification_token)
