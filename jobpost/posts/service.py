"""
Cas d'usage 'checkout': champs du formulaire -> erreurs ou commande.
"""
import logging
from typing import Any, Dict, Mapping

from jobpost.config import STRIPE_PUBLIC_KEY
from jobpost.payments.service import create_order
from . import form
from .validation import validate

logger = logging.getLogger(__name__)

def process_submission(fields: Mapping[str, str]) -> Dict[str, Any]:
    """
    Construit le lot et les offres, valide, puis crée la commande.
    - Erreurs: {"errors": {...}} sans aucun appel à la passerelle.
    - Succès: {"order", "batch", "entries", "gatewayKey"}; lot et offres sont
      renvoyés pour être réexpédiés tels quels à la vérification.
    """
    batch = form.build_batch(fields)
    entries = form.build_entries(fields, batch.post_count)
    errors = validate(batch, entries)
    if errors:
        logger.info("posts.checkout rejected fields=%s posts=%s", len(errors), batch.post_count)
        return {"errors": errors}

    order = create_order(
        batch.post_count,
        batch.currency_code,
        metadata={"contact_email": batch.contact_email, "company": batch.company_name},
    )
    return {
        "order": order.model_dump(by_alias=True),
        "batch": batch.model_dump(by_alias=True),
        "entries": [e.model_dump(by_alias=True) for e in entries],
        "gatewayKey": STRIPE_PUBLIC_KEY,
    }
