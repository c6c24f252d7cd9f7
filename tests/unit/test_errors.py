"""Tests for sc_common.errors and sc_common.response."""

from src.sc_common.errors import (
    AppError,
    DuplicateInquiryError,
    InquiryConflictError,
    InvalidInquiryTransitionError,
    ItemNotFoundError,
    MessageRateLimitError,
    PayloadValidationError,
    PostNotFoundError,
)
from src.sc_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.data is None

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_payload_validation_carries_all_errors(self) -> None:
        err = PayloadValidationError(["a", "b"])
        assert err.code == 2001
        assert err.http_status == 422
        assert err.data == {"errors": ["a", "b"]}
        assert err.errors == ["a", "b"]

    def test_item_not_found(self) -> None:
        err = ItemNotFoundError("itm_1")
        assert err.code == 3001
        assert err.http_status == 404
        assert err.data == {"item_id": "itm_1"}

    def test_inquiry_errors(self) -> None:
        assert DuplicateInquiryError().http_status == 409
        assert InquiryConflictError("inq_1").code == 4008
        assert MessageRateLimitError().http_status == 429

    def test_invalid_transition_names_states(self) -> None:
        err = InvalidInquiryTransitionError("completed", "active")
        assert "completed" in err.message
        assert "active" in err.message

    def test_post_not_found(self) -> None:
        assert PostNotFoundError("pst_1").code == 5001


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"id": "x"})
        assert resp.success is True
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "x"}
        assert resp.request_id.startswith("req_")

    def test_error_keeps_data(self) -> None:
        resp = error_response(2001, "입력값이 올바르지 않습니다.", {"errors": ["x"]})
        assert resp.success is False
        assert resp.code == 2001
        assert resp.data == {"errors": ["x"]}

    def test_error_without_data(self) -> None:
        resp = error_response(3001, "없음")
        assert isinstance(resp, ApiResponse)
        assert resp.data is None
