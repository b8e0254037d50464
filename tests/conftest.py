import os

# Avant l'import de l'app: pas de Redis en tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
import stripe
from typing import Any, AsyncIterator, Dict, Generator, List
from fastapi.testclient import TestClient

from jobpost.app import app as fastapi_app
from jobpost.posts.views import get_logo_uploader

PUBLIC_KEY = "pk_test_123"
LOGO_URL = "https://storage.example.test/logos/acme.png"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


class FakeStripe:
    """Module stripe en mémoire: PaymentIntent.create / retrieve."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.intents: Dict[str, Dict[str, Any]] = {}
        self.fail_create = False
        self.PaymentIntent = self

    def create(self, **kwargs):
        if self.fail_create:
            raise stripe.APIConnectionError("Network error")
        n = len(self.created) + 1
        intent = {
            "id": f"pi_test_{n}",
            "amount": kwargs["amount"],
            "currency": kwargs["currency"],
            "status": "requires_payment_method",
            "client_secret": f"pi_test_{n}_secret_abc",
            "latest_charge": None,
            "metadata": kwargs.get("metadata") or {},
        }
        self.created.append(kwargs)
        self.intents[intent["id"]] = intent
        return intent

    def retrieve(self, order_id):
        if order_id not in self.intents:
            raise stripe.InvalidRequestError(f"No such payment_intent: '{order_id}'", "id")
        return self.intents[order_id]

    def capture(self, order_id: str):
        """
        Simule confirmPayment dans l'UI Stripe.js.
        Retourne ce que le navigateur reçoit: (paymentIntent.id, paymentIntent.client_secret).
        """
        intent = self.intents[order_id]
        intent["status"] = "succeeded"
        intent["latest_charge"] = "ch_" + order_id.removeprefix("pi_")
        return intent["id"], intent["client_secret"]

# Stripe jamais appelé pour de vrai
@pytest.fixture(autouse=True)
def fake_stripe(monkeypatch) -> FakeStripe:
    fake = FakeStripe()
    monkeypatch.setattr("jobpost.payments.gateway.require_stripe", lambda: fake)
    monkeypatch.setattr("jobpost.posts.service.STRIPE_PUBLIC_KEY", PUBLIC_KEY)
    return fake


class FakeUploader:
    def __init__(self, url: str = LOGO_URL):
        self.url = url
        self.calls: List[Dict[str, Any]] = []
        self.error: Exception = None

    async def __call__(self, chunks: AsyncIterator[bytes], filename: str, content_type: str) -> str:
        data = b""
        async for chunk in chunks:
            data += chunk
        self.calls.append({"filename": filename, "content_type": content_type, "data": data})
        if self.error:
            raise self.error
        return self.url

# Le stockage des logos est remplacé par un uploader en mémoire
@pytest.fixture(autouse=True)
def logo_uploader(app) -> Generator[FakeUploader, None, None]:
    uploader = FakeUploader()
    app.dependency_overrides[get_logo_uploader] = lambda: uploader
    try:
        yield uploader
    finally:
        app.dependency_overrides.pop(get_logo_uploader, None)

@pytest.fixture
def checkout_form():
    """Fabrique les champs texte d'une soumission valide (n offres)."""
    def _make(post_count: int = 2, currency: str = "USD") -> Dict[str, str]:
        data = {
            "email": "jobs@acme.com",
            "website": "https://acme.com",
            "name": "Acme",
            "description": "Nous fabriquons des enclumes.",
            "color": "#1f2937",
            "expiresAfter": "30",
            "currency": currency,
            "postCount": str(post_count),
        }
        for i in range(post_count):
            data.update({
                f"posts[{i}].title": f"Développeur {i}",
                f"posts[{i}].type": "full-time",
                f"posts[{i}].location": "Remote",
                f"posts[{i}].salaryStart": "40000",
                f"posts[{i}].salaryEnd": "60000",
                f"posts[{i}].applyLink": f"https://acme.com/jobs/{i}",
                f"posts[{i}].description": "Python, FastAPI.",
                f"posts[{i}].tags": "python, fastapi ,",
            })
        return data
    return _make

@pytest.fixture
def logo_file():
    return {"logo": ("acme.png", PNG_BYTES, "image/png")}
