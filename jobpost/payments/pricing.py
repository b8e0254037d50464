"""
Tarification d'un lot: montant = nombre d'offres * prix unitaire.
Toujours en plus petite unité monétaire (entiers uniquement).
"""
from typing import Dict

from jobpost.constants import POST_PRICES, Currency
from jobpost.errors import PricingConfigError

# module jobpost.payments.pricing
def price_for(currency: str) -> int:
    """
    Prix unitaire d'une offre pour `currency` (ex: "USD" -> 500).
    Un tarif manquant est une erreur de configuration, pas une erreur utilisateur.
    """
    code = (currency or "").strip().upper()
    try:
        return int(POST_PRICES[code])
    except KeyError:
        raise PricingConfigError(f"Aucun tarif configuré pour la devise {code or '?'}") from None

def compute_amount(post_count: int, currency: str) -> int:
    return int(post_count) * price_for(currency)

def price_table() -> Dict[str, int]:
    return {c.value: price_for(c.value) for c in Currency}

def check_price_table() -> None:
    """Vérifie au démarrage que chaque devise supportée a un tarif entier positif."""
    for c in Currency:
        price = POST_PRICES.get(c.value)
        if not isinstance(price, int) or price <= 0:
            raise PricingConfigError(f"Tarif invalide ou manquant pour {c.value}")
