"""Who is acting on an order, relative to that order."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Buyer:
    id: str
    role = "buyer"


@dataclass(frozen=True)
class Seller:
    id: str
    role = "seller"


@dataclass(frozen=True)
class Neither:
    id: str
    role = None


Actor = Union[Buyer, Seller, Neither]


def resolve_actor(order, actor_id) -> Actor:
    """Classify ``actor_id`` against the parties of ``order``."""
    actor_id = str(actor_id)
    if actor_id == order.seller_id:
        return Seller(actor_id)
    if actor_id == order.buyer_id:
        return Buyer(actor_id)
    return Neither(actor_id)
