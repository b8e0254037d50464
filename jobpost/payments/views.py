import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from jobpost.errors import VerificationFailure
from jobpost.utils.rate_limit import optional_rate_limit
from jobpost.payments import service as payments_service
from jobpost.payments.models import PaymentConfirmation

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

# module jobpost.payments.views
@router.post("/verify", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def verify_payment(request: Request):
    """
    Vérifie la confirmation renvoyée par la passerelle.
    - Entrée JSON: { orderCreationId, paymentId, signature, batch, entries }
    - Réponses: {"success": true} | {"error": "..."} (400) | {"error", "kind": "gateway"} (502)
    - Un seul appel par paiement confirmé: aucune relance automatique côté client.
    """
    try:
        body = await request.json()
        payload = PaymentConfirmation.model_validate(body)
    except (ValueError, ValidationError):
        raise VerificationFailure("Confirmation de paiement invalide") from None
    return await run_in_threadpool(payments_service.verify_payment, payload)
