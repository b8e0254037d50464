"""
Parcours complets: formulaire -> commande -> passerelle -> vérification,
le contrôleur de handshake parlant à l'app via TestClient.
"""
from jobpost.payments.handshake import HandshakeState, PaymentHandshake


class FakeGatewayUI:
    def __init__(self):
        self.opened = []
        self.closed = 0

    def open(self, options):
        self.opened.append(options)

    def close(self):
        self.closed += 1


def test_two_valid_posts_in_usd_open_gateway_with_1000(client, checkout_form, logo_file, fake_stripe):
    ui = FakeGatewayUI()
    redirects = []
    hs = PaymentHandshake(client, ui, on_success=redirects.append)

    state = hs.submit(checkout_form(post_count=2, currency="USD"), files=logo_file)

    assert state is HandshakeState.GATEWAY_OPENED
    assert fake_stripe.created[0]["amount"] == 1000
    options = ui.opened[0]
    assert (options.amount, options.currency, options.key) == (1000, "USD", "pk_test_123")

    payment_id, signature = fake_stripe.capture(options.order_id)
    options.on_complete(payment_id, signature)

    assert hs.state is HandshakeState.SETTLED
    assert redirects == ["/?success=true"]

def test_payment_settles_with_charge_id_and_client_secret(client, checkout_form, logo_file, fake_stripe):
    ui = FakeGatewayUI()
    hs = PaymentHandshake(client, ui)
    hs.submit(checkout_form(post_count=1), files=logo_file)
    order_id = ui.opened[0].order_id

    # Paiement confirmé côté Stripe, le navigateur ne connaît que la charge et le client_secret
    fake_stripe.intents[order_id].update(status="succeeded", latest_charge="ch_real")
    ui.opened[0].on_complete("ch_real", hs.order["clientSecret"])

    assert hs.state is HandshakeState.SETTLED
    assert hs.failure is None

def test_missing_apply_method_on_second_post_blocks_order(client, checkout_form, logo_file, fake_stripe):
    form = checkout_form(post_count=2)
    del form["posts[1].applyLink"]
    ui = FakeGatewayUI()
    hs = PaymentHandshake(client, ui)

    state = hs.submit(form, files=logo_file)

    assert state is HandshakeState.IDLE
    assert "posts[1].applyEmail" in hs.errors
    assert fake_stripe.created == []
    assert ui.opened == []

def test_signature_mismatch_then_retry_reuses_order(client, checkout_form, logo_file, fake_stripe):
    ui = FakeGatewayUI()
    hs = PaymentHandshake(client, ui)
    hs.submit(checkout_form(post_count=1), files=logo_file)
    order_id = ui.opened[0].order_id
    payment_id, signature = fake_stripe.capture(order_id)

    ui.opened[0].on_complete(payment_id, "f" * 64)

    assert hs.state is HandshakeState.VERIFICATION_FAILED
    assert hs.failure == "signature mismatch"
    assert hs.payment_failed is True

    assert hs.retry() is HandshakeState.GATEWAY_OPENED
    assert ui.opened[1].order_id == order_id
    assert len(fake_stripe.created) == 1

    ui.opened[1].on_complete(payment_id, signature)
    assert hs.state is HandshakeState.SETTLED

def test_cancelled_payment_can_be_reopened(client, checkout_form, logo_file, fake_stripe):
    ui = FakeGatewayUI()
    hs = PaymentHandshake(client, ui)
    hs.submit(checkout_form(post_count=3, currency="EUR"), files=logo_file)

    ui.opened[0].on_dismiss()
    assert hs.state is HandshakeState.ORDER_CREATED

    hs.open_gateway()
    assert ui.opened[1].order_id == ui.opened[0].order_id
    assert ui.opened[1].amount == 1500
    assert len(fake_stripe.created) == 1

def test_corrected_submission_after_errors(client, checkout_form, logo_file, fake_stripe):
    form = checkout_form(post_count=1)
    form["color"] = "rouge"
    hs = PaymentHandshake(client, FakeGatewayUI())

    assert hs.submit(form, files=logo_file) is HandshakeState.IDLE
    assert set(hs.errors) == {"color"}

    form["color"] = "#ff0000"
    assert hs.submit(form, files=logo_file) is HandshakeState.GATEWAY_OPENED
    assert hs.errors == {}
