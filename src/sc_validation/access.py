"""Authorization predicates over a Caller.

Plain boolean combinators mirroring the database security rules. They
never raise; services decide which error to throw.
"""

from typing import Protocol

from src.sc_gateway.auth.caller import Caller


class SellerOwned(Protocol):
    seller_id: str


class CreatorOwned(Protocol):
    created_by: str


def is_authenticated(caller: Caller | None) -> bool:
    return caller is not None and bool(caller.uid)


def is_owner(caller: Caller | None, owner_id: str | None) -> bool:
    return is_authenticated(caller) and bool(owner_id) and caller.uid == owner_id  # type: ignore[union-attr]


def is_admin(caller: Caller | None) -> bool:
    """Token ``admin`` flag, or ``"admin"`` among the caller's roles."""
    if not is_authenticated(caller):
        return False
    return caller.admin is True or "admin" in caller.roles  # type: ignore[union-attr]


def is_item_owner(caller: Caller | None, item: SellerOwned) -> bool:
    return is_owner(caller, getattr(item, "seller_id", None))


def is_studio_owner(caller: Caller | None, studio: CreatorOwned) -> bool:
    return is_owner(caller, getattr(studio, "created_by", None))


def can_manage_item(caller: Caller | None, item: SellerOwned) -> bool:
    return is_item_owner(caller, item) or is_admin(caller)
