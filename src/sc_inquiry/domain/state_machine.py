"""Inquiry status transitions as an explicit table.

    state x actor role -> allowed next states

``active`` is the only state with outgoing edges; completed, cancelled and
reported are terminal. Sellers and admins may close or report an active
inquiry; a buyer may only report it.
"""

from collections.abc import Mapping
from types import MappingProxyType

from src.sc_common.enums import ActorRole, InquiryStatus
from src.sc_common.errors import (
    InquiryAccessDeniedError,
    InquiryTransitionForbiddenError,
    InvalidInquiryTransitionError,
)
from src.sc_gateway.auth.caller import Caller
from src.sc_inquiry.domain.models import Inquiry
from src.sc_validation.access import is_admin, is_owner

_CLOSE_OR_REPORT = frozenset({
    InquiryStatus.COMPLETED,
    InquiryStatus.CANCELLED,
    InquiryStatus.REPORTED,
})

TRANSITIONS: Mapping[InquiryStatus, Mapping[ActorRole, frozenset[InquiryStatus]]] = MappingProxyType({
    InquiryStatus.ACTIVE: MappingProxyType({
        ActorRole.SELLER: _CLOSE_OR_REPORT,
        ActorRole.ADMIN: _CLOSE_OR_REPORT,
        ActorRole.BUYER: frozenset({InquiryStatus.REPORTED}),
    }),
    InquiryStatus.COMPLETED: MappingProxyType({}),
    InquiryStatus.CANCELLED: MappingProxyType({}),
    InquiryStatus.REPORTED: MappingProxyType({}),
})


def is_terminal(status: InquiryStatus) -> bool:
    return not any(TRANSITIONS.get(status, {}).values())


def resolve_role(caller: Caller, inquiry: Inquiry) -> ActorRole | None:
    """Seller first, then admin, then buyer; None when the caller is not a party."""
    if is_owner(caller, inquiry.seller_id):
        return ActorRole.SELLER
    if is_admin(caller):
        return ActorRole.ADMIN
    if is_owner(caller, inquiry.buyer_id):
        return ActorRole.BUYER
    return None


def allowed_transitions(status: InquiryStatus, role: ActorRole) -> frozenset[InquiryStatus]:
    return TRANSITIONS.get(status, {}).get(role, frozenset())


def can_transition(status: InquiryStatus, role: ActorRole, target: InquiryStatus) -> bool:
    return target in allowed_transitions(status, role)


def validate_transition(status: InquiryStatus, role: ActorRole | None, target: InquiryStatus) -> None:
    """Raise unless ``role`` may move an inquiry from ``status`` to ``target``.

    Raises:
        InquiryAccessDeniedError: caller is not a party to the inquiry.
        InvalidInquiryTransitionError: no role may make this move.
        InquiryTransitionForbiddenError: another role could, this one may not.
    """
    if role is None:
        raise InquiryAccessDeniedError("문의 상태를 변경할 권한이 없습니다.")
    if can_transition(status, role, target):
        return
    reachable = set().union(*TRANSITIONS.get(status, {}).values())
    if target in reachable:
        raise InquiryTransitionForbiddenError()
    raise InvalidInquiryTransitionError(status.value, target.value)
