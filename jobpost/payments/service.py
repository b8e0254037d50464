"""
Cas d'usage 'payments': création de commande et vérification de paiement.
"""
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from jobpost.errors import VerificationFailure
from jobpost.posts.models import BatchSubmission, PostEntry
from jobpost.posts.validation import validate
from . import gateway
from . import pricing
from .models import OrderDescriptor, PaymentConfirmation

logger = logging.getLogger(__name__)

SIGNATURE_MISMATCH = "signature mismatch"

def create_order(post_count: int, currency: str, metadata: Optional[Dict[str, Any]] = None) -> OrderDescriptor:
    """
    Calcule le montant du lot puis crée la commande auprès de la passerelle.
    À n'appeler qu'après une validation sans erreur.
    """
    amount = pricing.compute_amount(post_count, currency)
    meta = {"kind": "job_posts_batch", "post_count": str(post_count)}
    meta.update({k: str(v) for k, v in (metadata or {}).items() if v is not None})
    order = gateway.create_order(amount=amount, currency=currency, metadata=meta)
    logger.info("payments.order created id=%s amount=%s currency=%s posts=%s", order.id, order.amount, order.currency, post_count)
    return order

def _reject(payload: PaymentConfirmation, reason: str, message: str) -> VerificationFailure:
    # Paiement capturé mais preuve refusée: possible falsification
    logger.warning(
        "payments.verify suspicious reason=%s order_id=%s payment_id=%s",
        reason, payload.order_creation_id, payload.payment_id,
    )
    return VerificationFailure(message)

def _charge_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return gateway._field(value, "id")

def verify_payment(payload: PaymentConfirmation) -> Dict[str, Any]:
    """
    Vérifie une confirmation de paiement (appel unique par paiement).
    Étapes:
      1) commande relue chez la passerelle, preuve comparée à son client_secret
      2) lot/offres renvoyés: reconstruits puis revalidés
      3) statut, paiement (charge ou PaymentIntent), montant, devise
    Retour: {"success": True}; sinon VerificationFailure (ou GatewayError si la passerelle est injoignable).
    """
    order = gateway.retrieve_order(payload.order_creation_id)
    if not gateway.verify_signature(order, payload.signature):
        raise _reject(payload, "signature", SIGNATURE_MISMATCH)

    try:
        batch = BatchSubmission.model_validate(payload.batch)
        entries = [PostEntry.model_validate(e) for e in payload.entries]
    except ValidationError:
        raise _reject(payload, "payload", "Lot de paiement illisible") from None
    if validate(batch, entries):
        raise _reject(payload, "payload", "Lot de paiement altéré")

    if order["status"] != "succeeded":
        raise _reject(payload, "status", f"Paiement non confirmé (status={order['status']})")
    # Stripe.js expose l'id du PaymentIntent, le serveur voit aussi la charge
    known_ids = {order["id"], _charge_id(order.get("payment_id"))}
    if payload.payment_id not in known_ids:
        raise _reject(payload, "payment_id", "Paiement sans rapport avec la commande")

    expected = pricing.compute_amount(len(entries), batch.currency_code)
    if order["amount"] != expected or order["currency"] != (batch.currency_code or "").upper():
        raise _reject(payload, "amount", "Montant payé incohérent avec le lot")

    logger.info("payments.verify ok order_id=%s posts=%s amount=%s", payload.order_creation_id, len(entries), expected)
    return {"success": True}
