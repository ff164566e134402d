"""Authenticated actor as handed over by the auth collaborator."""

from dataclasses import dataclass
from enum import Enum

from ordering.exceptions import NotAuthorized


class Role(Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role

    @classmethod
    def of(cls, actor_id: str, role: str) -> "Actor":
        try:
            return cls(id=str(actor_id), role=Role(role))
        except ValueError:
            raise NotAuthorized(f"Unknown role '{role}'", role=role) from None


def require_buyer(actor_role: str) -> None:
    """Only buyers may fill a cart or check out."""
    if actor_role != Role.BUYER.value:
        raise NotAuthorized("Only buyers can purchase", role=actor_role)
