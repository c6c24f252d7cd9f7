"""Unit tests for the inquiry transition table."""

import pytest

from src.sc_common.enums import ActorRole, InquiryStatus
from src.sc_common.errors import (
    InquiryAccessDeniedError,
    InquiryTransitionForbiddenError,
    InvalidInquiryTransitionError,
)
from src.sc_gateway.auth.caller import Caller
from src.sc_inquiry.domain.models import Inquiry
from src.sc_inquiry.domain.state_machine import (
    TRANSITIONS,
    allowed_transitions,
    can_transition,
    is_terminal,
    resolve_role,
    validate_transition,
)

ACTIVE = InquiryStatus.ACTIVE
COMPLETED = InquiryStatus.COMPLETED
CANCELLED = InquiryStatus.CANCELLED
REPORTED = InquiryStatus.REPORTED


def _make_inquiry(**kwargs) -> Inquiry:
    defaults = dict(
        id="inq_1", item_id="itm_1", item_title="댄스화", item_image=None,
        buyer_id="u-buyer", buyer_name="구매자", seller_id="u-seller", seller_name="판매자",
        status="active", last_message="안녕하세요", last_message_at=None, last_sender_id="u-buyer",
    )
    defaults.update(kwargs)
    return Inquiry(**defaults)


class TestTable:
    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            TRANSITIONS[ACTIVE] = {}  # type: ignore[index]

    @pytest.mark.parametrize("status", [COMPLETED, CANCELLED, REPORTED])
    def test_terminal_states(self, status: InquiryStatus) -> None:
        assert is_terminal(status) is True
        for role in ActorRole:
            assert allowed_transitions(status, role) == frozenset()

    def test_active_is_not_terminal(self) -> None:
        assert is_terminal(ACTIVE) is False

    def test_seller_and_admin_may_close_or_report(self) -> None:
        for role in (ActorRole.SELLER, ActorRole.ADMIN):
            assert allowed_transitions(ACTIVE, role) == {COMPLETED, CANCELLED, REPORTED}

    def test_buyer_may_only_report(self) -> None:
        assert allowed_transitions(ACTIVE, ActorRole.BUYER) == {REPORTED}
        assert can_transition(ACTIVE, ActorRole.BUYER, COMPLETED) is False

    def test_no_self_transition(self) -> None:
        for role in ActorRole:
            assert can_transition(ACTIVE, role, ACTIVE) is False


class TestValidateTransition:
    def test_allowed(self) -> None:
        validate_transition(ACTIVE, ActorRole.SELLER, COMPLETED)
        validate_transition(ACTIVE, ActorRole.BUYER, REPORTED)

    def test_buyer_cannot_complete(self) -> None:
        with pytest.raises(InquiryTransitionForbiddenError):
            validate_transition(ACTIVE, ActorRole.BUYER, COMPLETED)

    def test_buyer_cannot_cancel(self) -> None:
        with pytest.raises(InquiryTransitionForbiddenError):
            validate_transition(ACTIVE, ActorRole.BUYER, CANCELLED)

    def test_terminal_state_cannot_move(self) -> None:
        with pytest.raises(InvalidInquiryTransitionError) as exc:
            validate_transition(COMPLETED, ActorRole.ADMIN, ACTIVE)
        assert exc.value.code == 4007

    def test_reactivation_is_invalid(self) -> None:
        with pytest.raises(InvalidInquiryTransitionError):
            validate_transition(ACTIVE, ActorRole.SELLER, ACTIVE)

    def test_non_party(self) -> None:
        with pytest.raises(InquiryAccessDeniedError):
            validate_transition(ACTIVE, None, REPORTED)


class TestResolveRole:
    def test_seller(self) -> None:
        assert resolve_role(Caller(uid="u-seller"), _make_inquiry()) is ActorRole.SELLER

    def test_buyer(self) -> None:
        assert resolve_role(Caller(uid="u-buyer"), _make_inquiry()) is ActorRole.BUYER

    def test_admin(self) -> None:
        assert resolve_role(Caller(uid="u-admin", admin=True), _make_inquiry()) is ActorRole.ADMIN

    def test_seller_wins_over_admin(self) -> None:
        assert resolve_role(Caller(uid="u-seller", admin=True), _make_inquiry()) is ActorRole.SELLER

    def test_admin_buyer_acts_as_admin(self) -> None:
        assert resolve_role(Caller(uid="u-buyer", roles=("admin",)), _make_inquiry()) is ActorRole.ADMIN

    def test_stranger(self) -> None:
        assert resolve_role(Caller(uid="u-x"), _make_inquiry()) is None
        assert resolve_role(Caller(uid=None), _make_inquiry()) is None
