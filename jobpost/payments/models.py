# module jobpost.payments.models
"""
Objets échangés avec la passerelle et l'endpoint de vérification.
Les alias sont les noms JSON du contrat HTTP.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderDescriptor(BaseModel):
    """Commande créée par la passerelle, transmise telle quelle au client."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    amount: int
    currency: str
    client_secret: Optional[str] = Field(default=None, alias="clientSecret")


class PaymentConfirmation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_creation_id: str = Field(alias="orderCreationId", min_length=1)
    payment_id: str = Field(alias="paymentId", min_length=1)
    signature: str = Field(min_length=1)
    # Lot et offres tels que renvoyés par la création de commande
    batch: Dict[str, Any]
    entries: List[Dict[str, Any]] = Field(default_factory=list)
