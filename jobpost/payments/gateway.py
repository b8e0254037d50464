"""
Adaptateur passerelle de paiement (Stripe).

- Une commande est un PaymentIntent: montant entier en plus petite unité.
- La preuve de paiement est le client_secret du PaymentIntent: Stripe.js le
  remet au navigateur (confirmPayment), qui le renvoie à la vérification.
- Toute erreur Stripe devient GatewayError.
"""
import hmac
import logging
from typing import Any, Dict, Optional

import stripe

from jobpost.config import STRIPE_SECRET_KEY
from jobpost.errors import GatewayError
from jobpost.payments.models import OrderDescriptor

logger = logging.getLogger(__name__)

# module jobpost.payments.gateway
def require_stripe() -> stripe:
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    Sans STRIPE_SECRET_KEY, lève GatewayError au lieu de laisser le SDK échouer plus tard.
    """
    if not STRIPE_SECRET_KEY:
        raise GatewayError("Passerelle de paiement non configurée (STRIPE_SECRET_KEY)")
    stripe.api_key = STRIPE_SECRET_KEY
    return stripe

def _field(obj: Any, name: str, default: Any = None) -> Any:
    # StripeObject, dict ou objet simple
    try:
        value = obj[name]
    except (KeyError, TypeError, IndexError):
        value = getattr(obj, name, default)
    return default if value is None else value

def create_order(*, amount: int, currency: str, metadata: Optional[Dict[str, str]] = None) -> OrderDescriptor:
    """
    Crée la commande côté passerelle.
    - amount: montant en plus petite unité (ex: 1000 = 10.00 USD)
    - currency: code ISO ("USD"), envoyé en minuscules à Stripe
    Retour: OrderDescriptor(id, amount, currency en majuscules, clientSecret)
    """
    client = require_stripe()
    try:
        intent = client.PaymentIntent.create(
            amount=amount,
            currency=currency.lower(),
            metadata=metadata or {},
            automatic_payment_methods={"enabled": True},
        )
    except stripe.StripeError as e:
        logger.warning("payments.gateway create_order failed amount=%s currency=%s err=%s", amount, currency, e)
        raise GatewayError("La passerelle de paiement a refusé la commande") from e
    order_id = _field(intent, "id")
    if not order_id:
        raise GatewayError("Réponse de la passerelle sans identifiant de commande")
    return OrderDescriptor(
        id=str(order_id),
        amount=int(_field(intent, "amount", amount)),
        currency=str(_field(intent, "currency", currency)).upper(),
        clientSecret=_field(intent, "client_secret"),
    )

def retrieve_order(order_id: str) -> Dict[str, Any]:
    """
    Relit la commande pour la vérification.
    Retour: {"id", "amount", "currency", "status", "payment_id", "client_secret", "metadata"}
    """
    client = require_stripe()
    try:
        intent = client.PaymentIntent.retrieve(order_id)
    except stripe.StripeError as e:
        logger.warning("payments.gateway retrieve_order failed order_id=%s err=%s", order_id, e)
        raise GatewayError("Commande introuvable auprès de la passerelle") from e
    return {
        "id": str(_field(intent, "id", order_id)),
        "amount": int(_field(intent, "amount", 0)),
        "currency": str(_field(intent, "currency", "")).upper(),
        "status": str(_field(intent, "status", "")),
        "payment_id": _field(intent, "latest_charge"),
        "client_secret": _field(intent, "client_secret"),
        "metadata": dict(_field(intent, "metadata", {}) or {}),
    }

def verify_signature(order: Dict[str, Any], signature: str) -> bool:
    """
    Compare la preuve renvoyée par le client au client_secret de la commande relue.
    Le secret doit appartenir à cette commande ("{id}_secret_...").
    """
    expected = str(order.get("client_secret") or "")
    if not expected.startswith(f"{order.get('id')}_secret_"):
        return False
    return hmac.compare_digest(expected.encode("utf-8"), (signature or "").strip().encode("utf-8"))
