import pytest

from jobpost.errors import GatewayError
from jobpost.payments import gateway


def test_signature_is_the_order_client_secret():
    order = {"id": "pi_1", "client_secret": "pi_1_secret_xyz"}
    assert gateway.verify_signature(order, "pi_1_secret_xyz")
    assert gateway.verify_signature(order, " pi_1_secret_xyz\n")
    assert not gateway.verify_signature(order, "pi_1_secret_xy")
    assert not gateway.verify_signature(order, "")

def test_signature_must_belong_to_the_order():
    # Secret d'une autre commande: refusé même s'il est recopié à l'identique
    order = {"id": "pi_1", "client_secret": "pi_2_secret_xyz"}
    assert not gateway.verify_signature(order, "pi_2_secret_xyz")
    assert not gateway.verify_signature({"id": "pi_1", "client_secret": None}, "")

def test_require_stripe_without_key(monkeypatch):
    # Le fixture autouse remplace require_stripe: on restaure la vraie fonction
    monkeypatch.undo()
    monkeypatch.setattr("jobpost.payments.gateway.STRIPE_SECRET_KEY", "")
    with pytest.raises(GatewayError):
        gateway.require_stripe()

def test_create_order_uses_minor_units(fake_stripe):
    order = gateway.create_order(amount=1000, currency="USD", metadata={"post_count": "2"})

    assert order.id == "pi_test_1"
    assert order.amount == 1000
    assert order.currency == "USD"
    assert order.client_secret == "pi_test_1_secret_abc"
    sent = fake_stripe.created[0]
    assert sent["amount"] == 1000
    assert sent["currency"] == "usd"
    assert sent["metadata"] == {"post_count": "2"}

def test_create_order_failure_becomes_gateway_error(fake_stripe):
    fake_stripe.fail_create = True
    with pytest.raises(GatewayError):
        gateway.create_order(amount=500, currency="USD")

def test_retrieve_order_normalizes_fields(fake_stripe):
    order = gateway.create_order(amount=800, currency="GBP")
    fake_stripe.capture(order.id)

    info = gateway.retrieve_order(order.id)

    assert info["status"] == "succeeded"
    assert info["currency"] == "GBP"
    assert info["amount"] == 800
    assert info["payment_id"] == "ch_test_1"
    assert info["client_secret"] == "pi_test_1_secret_abc"

def test_retrieve_unknown_order(fake_stripe):
    with pytest.raises(GatewayError):
        gateway.retrieve_order("pi_missing")
