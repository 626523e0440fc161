"""
Order status state machine.

    PENDING -> PAID -> SHIPPED -> DELIVERED
                               -> CANCELLED

DELIVERED and CANCELLED are terminal. Each edge lists the parties allowed to
take it; the acting id must equal that party's id on the order.
"""

from typing import Dict, FrozenSet, List, Tuple

from .actors import Buyer, Seller
from .entities import OrderStatus
from .errors import InvalidTransitionError, UnauthorizedError

TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], FrozenSet[type]] = {
    (OrderStatus.PENDING, OrderStatus.PAID): frozenset({Seller}),
    (OrderStatus.PAID, OrderStatus.SHIPPED): frozenset({Seller}),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED): frozenset({Buyer}),
    (OrderStatus.SHIPPED, OrderStatus.CANCELLED): frozenset({Buyer, Seller}),
}


def _party_id(order, actor) -> str:
    if isinstance(actor, Seller):
        return order.seller_id
    if isinstance(actor, Buyer):
        return order.buyer_id
    return ""


def is_authorized(order, new_status: OrderStatus, actor) -> bool:
    allowed = TRANSITIONS.get((order.status, new_status), frozenset())
    if type(actor) not in allowed:
        return False
    return actor.id == _party_id(order, actor)


def check_transition(order, new_status: OrderStatus, actor) -> None:
    """
    Validate a transition without applying it.

    Args:
        order: Current order value
        new_status: Requested status
        actor: Buyer, Seller or Neither

    Raises:
        InvalidTransitionError: the (from, to) pair is not in TRANSITIONS
        UnauthorizedError: the pair is legal but not for this actor
    """
    if (order.status, new_status) not in TRANSITIONS:
        raise InvalidTransitionError(order.status, new_status)

    if not is_authorized(order, new_status, actor):
        roles = sorted(role.role for role in TRANSITIONS[(order.status, new_status)])
        raise UnauthorizedError(
            f"User {actor.id} may not move order {order.id} from {order.status.value} to {new_status.value}; "
            f"requires {' or '.join(roles)}"
        )


def allowed_transitions(order, actor) -> List[OrderStatus]:
    """Statuses ``actor`` may move ``order`` to next, in table order."""
    return [
        to_status
        for (from_status, to_status) in TRANSITIONS
        if from_status == order.status and is_authorized(order, to_status, actor)
    ]
