"""Root conftest: settings, in-memory database, fake payment gateway and mailer.

Every test gets its own in-memory SQLite database (``sqlite://`` shares one
connection through StaticPool) and its own products/public directories.
"""

import os
import tempfile

# Keep the module-level app away from the working directory and real keys
_scratch = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ.setdefault("PRODUCTS_DIR", os.path.join(_scratch, "products"))
os.environ.setdefault("PUBLIC_DIR", os.path.join(_scratch, "public"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BREVO_API_KEY", "test-brevo-key")

import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.database import Database
from storefront.main import create_app
from storefront.services.email_service import Mailer
from storefront.services.payment_service import PaymentGateway
from storefront.utils.cache import ReadThroughCache
from storefront.utils.hash import hash_password

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct horse"
WEBHOOK_SECRET = "whsec_test"


class FakeGateway(PaymentGateway):
    """Records created orders instead of calling Razorpay."""

    def __init__(self, settings: Settings):
        super().__init__(
            settings.razorpay_key_id,
            settings.razorpay_key_secret,
            settings.razorpay_webhook_secret,
            currency=settings.currency,
        )
        self.created = []
        self.orders = {}

    def create_order(self, amount_in_cents, notes, receipt=None):
        order = {
            "id": f"order_test_{len(self.created) + 1}",
            "amount": amount_in_cents,
            "currency": self.currency,
            "notes": notes,
            "status": "created",
        }
        self.created.append(order)
        self.orders[order["id"]] = order
        return order

    def fetch_order(self, gateway_order_id):
        return self.orders[gateway_order_id]


class FakeMailer(Mailer):
    """Renders the real templates and keeps the messages instead of sending."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent = []
        self.deliver = True
        self.error = None

    def send(self, to, subject, html):
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html})
        return self.deliver


@pytest.fixture
def settings(tmp_path):
    return Settings(
        env="local",
        database_url="sqlite://",
        admin_username=ADMIN_USERNAME,
        hashed_admin_password=hash_password(ADMIN_PASSWORD),
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret="rzp_test_secret",
        razorpay_webhook_secret=WEBHOOK_SECRET,
        currency="USD",
        base_url="http://testserver",
        products_dir=str(tmp_path / "products"),
        public_dir=str(tmp_path / "public"),
    )


@pytest.fixture
def db():
    database = Database("sqlite://")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def session(db):
    with db.session() as s:
        yield s


@pytest.fixture
def gateway(settings):
    return FakeGateway(settings)


@pytest.fixture
def mailer(settings):
    return FakeMailer(settings)


@pytest.fixture
def cache():
    return ReadThroughCache(ttl_seconds=60)


@pytest.fixture
def client(settings, gateway, mailer):
    app = create_app(settings, gateway=gateway, mailer=mailer)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def app_db(client):
    """The database behind ``client``; open short sessions on it to seed or inspect."""
    return client.app.state.db


@pytest.fixture
def admin_auth():
    return (ADMIN_USERNAME, ADMIN_PASSWORD)
