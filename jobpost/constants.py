"""
Constantes métier partagées (devises, types de contrat, durées, tarifs).
"""
from enum import Enum
from typing import Dict, Tuple


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    FREELANCE = "freelance"
    INTERNSHIP = "internship"


# Prix d'une offre, en plus petite unité monétaire (paise, cents, pence)
POST_PRICES: Dict[str, int] = {
    Currency.INR.value: 39900,
    Currency.USD.value: 500,
    Currency.EUR.value: 500,
    Currency.GBP.value: 400,
}

# Durées de publication proposées (jours)
EXPIRY_OPTIONS: Tuple[int, ...] = (30, 60, 90)

MAX_TAGS_PER_POST = 10
MAX_TAG_LENGTH = 30
