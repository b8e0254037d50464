"""
Contrôleur de handshake de paiement (côté client).

IDLE -> ORDER_CREATED -> GATEWAY_OPENED -> {CONFIRMED | CANCELLED | VERIFICATION_FAILED} -> SETTLED

- L'identifiant de commande est le jeton de reprise: le callback de la
  passerelle arrive plus tard, sur une autre interaction.
- Une réponse contenant "errors" ne déclenche jamais l'ouverture de la passerelle.
- La vérification est appelée une seule fois par paiement; un échec laisse
  l'utilisateur relancer le paiement avec la même commande.

Le client HTTP est un httpx.Client (base_url vers l'API); l'UI de la
passerelle est un collaborateur exposant open(options) et close().
"""
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from jobpost.config import CHECKOUT_SUCCESS_PATH, GATEWAY_OPEN_TIMEOUT_SECONDS
from jobpost.errors import HandshakeStateError
from jobpost.payments.models import PaymentConfirmation

logger = logging.getLogger(__name__)


class HandshakeState(str, Enum):
    IDLE = "idle"
    ORDER_CREATED = "order_created"
    GATEWAY_OPENED = "gateway_opened"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    VERIFICATION_FAILED = "verification_failed"
    SETTLED = "settled"


_TRANSITIONS = {
    HandshakeState.IDLE: {HandshakeState.ORDER_CREATED},
    HandshakeState.ORDER_CREATED: {HandshakeState.GATEWAY_OPENED},
    HandshakeState.GATEWAY_OPENED: {HandshakeState.CONFIRMED, HandshakeState.CANCELLED},
    HandshakeState.CONFIRMED: {HandshakeState.SETTLED, HandshakeState.VERIFICATION_FAILED},
    HandshakeState.CANCELLED: {HandshakeState.ORDER_CREATED},
    HandshakeState.VERIFICATION_FAILED: {HandshakeState.ORDER_CREATED},
    HandshakeState.SETTLED: set(),
}


class GatewayOptions:
    """Options de lancement de l'UI de la passerelle."""

    def __init__(
        self,
        key: str,
        amount: int,
        currency: str,
        order_id: str,
        on_complete: Callable[[str, str], Any],
        on_dismiss: Callable[[], Any],
    ):
        self.key = key
        self.amount = amount
        self.currency = currency
        self.order_id = order_id
        self.on_complete = on_complete
        self.on_dismiss = on_dismiss

    def as_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "amount": self.amount, "currency": self.currency, "order_id": self.order_id}


class PaymentHandshake:
    def __init__(
        self,
        client: httpx.Client,
        gateway_ui: Any,
        on_success: Optional[Callable[[str], Any]] = None,
        *,
        checkout_path: str = "/api/v1/posts/checkout",
        verify_path: str = "/api/v1/payments/verify",
        success_path: str = CHECKOUT_SUCCESS_PATH,
        open_timeout: float = GATEWAY_OPEN_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.gateway_ui = gateway_ui
        self.on_success = on_success
        self.checkout_path = checkout_path
        self.verify_path = verify_path
        self.success_path = success_path
        self.open_timeout = open_timeout
        self._clock = clock

        self.state = HandshakeState.IDLE
        self.busy = False
        self.errors: Dict[str, str] = {}
        self.failure: Optional[str] = None
        self.failure_kind: Optional[str] = None
        self.payment_failed = False

        # Réponse de création de commande (jamais relue depuis le formulaire)
        self.order: Optional[Dict[str, Any]] = None
        self.batch: Optional[Dict[str, Any]] = None
        self.entries: List[Dict[str, Any]] = []
        self.gateway_key: Optional[str] = None
        self.opened_at: Optional[float] = None

    @property
    def order_id(self) -> Optional[str]:
        return (self.order or {}).get("id")

    def _transition(self, target: HandshakeState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise HandshakeStateError(f"Transition interdite: {self.state.value} -> {target.value}")
        logger.debug("payments.handshake %s -> %s order_id=%s", self.state.value, target.value, self.order_id)
        self.state = target

    def _fail(self, message: str, kind: str) -> None:
        self.failure = message
        self.failure_kind = kind

    def submit(self, data: Dict[str, Any], files: Optional[Dict[str, Any]] = None) -> HandshakeState:
        """
        Envoie le formulaire multipart à l'endpoint d'action.
        - {"errors"}: reste IDLE, erreurs exposées dans self.errors
        - échec passerelle/réseau: reste IDLE, self.failure renseigné
        - commande reçue: ORDER_CREATED puis ouverture de la passerelle
        """
        if self.state is not HandshakeState.IDLE:
            raise HandshakeStateError(f"Soumission impossible depuis l'état {self.state.value}")
        if self.busy:
            raise HandshakeStateError("Une requête est déjà en cours")
        self.busy = True
        try:
            resp = self.client.post(self.checkout_path, data=data, files=files)
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("payments.handshake checkout unreachable err=%s", e)
            self.errors = {}
            self._fail("Service de commande injoignable", "network")
            return self.state
        finally:
            self.busy = False
        return self.receive_action_response(payload)

    def receive_action_response(self, payload: Dict[str, Any]) -> HandshakeState:
        if self.state is not HandshakeState.IDLE:
            raise HandshakeStateError(f"Réponse de commande inattendue dans l'état {self.state.value}")
        self.errors = {}
        self.failure = None
        self.failure_kind = None
        payload = payload if isinstance(payload, dict) else {}

        if "errors" in payload:
            self.errors = dict(payload.get("errors") or {})
            return self.state
        order = payload.get("order")
        if not isinstance(order, dict) or not order.get("id") or "error" in payload:
            self._fail(str(payload.get("error") or "Création de commande impossible"), str(payload.get("kind") or "gateway"))
            return self.state

        self.order = order
        self.batch = payload.get("batch") or {}
        self.entries = list(payload.get("entries") or [])
        self.gateway_key = payload.get("gatewayKey")
        self._transition(HandshakeState.ORDER_CREATED)
        return self.open_gateway()

    def open_gateway(self) -> HandshakeState:
        if self.state is not HandshakeState.ORDER_CREATED:
            raise HandshakeStateError(f"Ouverture de la passerelle impossible depuis {self.state.value}")
        options = GatewayOptions(
            key=self.gateway_key,
            amount=self.order["amount"],
            currency=self.order["currency"],
            order_id=self.order["id"],
            on_complete=self.complete,
            on_dismiss=self.dismiss,
        )
        # Avant open(): l'UI peut rappeler on_complete/on_dismiss de manière synchrone
        self._transition(HandshakeState.GATEWAY_OPENED)
        self.opened_at = self._clock()
        logger.info("payments.handshake gateway opened order_id=%s amount=%s currency=%s", options.order_id, options.amount, options.currency)
        self.gateway_ui.open(options)
        return self.state

    def complete(self, payment_id: str, signature: str) -> HandshakeState:
        """
        Callback de la passerelle: empaquette la confirmation et l'envoie
        une seule fois à l'endpoint de vérification.
        Un callback incomplet (sans id ni preuve) échoue sans appel réseau.
        """
        if self.busy:
            raise HandshakeStateError("Une requête est déjà en cours")
        self._transition(HandshakeState.CONFIRMED)
        self.opened_at = None
        try:
            confirmation = PaymentConfirmation(
                orderCreationId=self.order["id"],
                paymentId=payment_id,
                signature=signature,
                batch=self.batch,
                entries=self.entries,
            )
        except ValidationError:
            logger.warning("payments.handshake incomplete gateway callback order_id=%s", self.order_id)
            return self._verification_failed({"error": "Confirmation de paiement incomplète", "kind": "gateway"})

        self.busy = True
        try:
            resp = self.client.post(self.verify_path, json=confirmation.model_dump(by_alias=True))
            result = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("payments.handshake verify unreachable order_id=%s err=%s", self.order_id, e)
            result = {"error": "Vérification du paiement injoignable", "kind": "network"}
        finally:
            self.busy = False

        if isinstance(result, dict) and result.get("success") is True:
            self.payment_failed = False
            self.failure = None
            self.failure_kind = None
            self._transition(HandshakeState.SETTLED)
            if self.on_success:
                self.on_success(self.success_path)
            return self.state
        return self._verification_failed(result if isinstance(result, dict) else {})

    def _verification_failed(self, result: Dict[str, Any]) -> HandshakeState:
        self._fail(str(result.get("error") or "Paiement refusé"), str(result.get("kind") or "verification"))
        self.payment_failed = True
        logger.warning("payments.handshake verification failed order_id=%s error=%s", self.order_id, self.failure)
        self._transition(HandshakeState.VERIFICATION_FAILED)
        return self.state

    def dismiss(self) -> HandshakeState:
        """Fermeture de l'UI sans paiement: la commande reste valide."""
        if self.state is not HandshakeState.GATEWAY_OPENED:
            # Fermeture tardive (déjà confirmé ou expiré)
            return self.state
        self._transition(HandshakeState.CANCELLED)
        self.opened_at = None
        self._transition(HandshakeState.ORDER_CREATED)
        return self.state

    def expire_if_stale(self, now: Optional[float] = None) -> bool:
        if self.state is not HandshakeState.GATEWAY_OPENED or self.opened_at is None:
            return False
        now = self._clock() if now is None else now
        if now - self.opened_at <= self.open_timeout:
            return False
        logger.info("payments.handshake gateway expired order_id=%s", self.order_id)
        self.dismiss()
        close = getattr(self.gateway_ui, "close", None)
        if close:
            close()
        return True

    def retry(self) -> HandshakeState:
        """Relance le paiement après un échec de vérification (même commande)."""
        if self.state is not HandshakeState.VERIFICATION_FAILED:
            raise HandshakeStateError(f"Relance impossible depuis {self.state.value}")
        self._transition(HandshakeState.ORDER_CREATED)
        self.payment_failed = False
        self.failure = None
        self.failure_kind = None
        return self.open_gateway()
