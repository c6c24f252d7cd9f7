"""Unified error codes and custom exceptions.

Messages are user-facing and localized (Korean); the API layer passes
them through unchanged.

Error code ranges:
  1xxx: Auth
  2xxx: Validation
  3xxx: Marketplace
  4xxx: Inquiry
  5xxx: Community
  6xxx: Geo
  7xxx: Studio
  8xxx: Notification
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        data: Any = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.data = data
        super().__init__(message)


# --- 1xxx: Auth ---

class AuthRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "로그인이 필요합니다.", 401)


class InvalidTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "인증 정보가 유효하지 않거나 만료되었습니다.", 401)


class PermissionDeniedError(AppError):
    def __init__(self, message: str = "권한이 없습니다.") -> None:
        super().__init__(1003, message, 403)


# --- 2xxx: Validation ---

class PayloadValidationError(AppError):
    """Carries every violated rule, not just the first."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            2001,
            "입력값이 올바르지 않습니다.",
            422,
            data={"errors": list(errors)},
        )
        self.errors = list(errors)


class ContentValidationError(AppError):
    def __init__(self, message: str) -> None:
        super().__init__(2002, message, 422)


# --- 3xxx: Marketplace ---

class ItemNotFoundError(AppError):
    def __init__(self, item_id: str) -> None:
        super().__init__(3001, "상품을 찾을 수 없습니다.", 404, data={"item_id": item_id})


class ItemAccessDeniedError(AppError):
    def __init__(self, message: str = "수정 권한이 없습니다.") -> None:
        super().__init__(3002, message, 403)


class InvalidItemStatusError(AppError):
    def __init__(self, status: str) -> None:
        super().__init__(3003, f"올바르지 않은 거래 상태입니다: {status}", 422)


class EmptyUpdateError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "업데이트할 데이터가 없습니다.", 422)


# --- 4xxx: Inquiry ---

class InquiryNotFoundError(AppError):
    def __init__(self, inquiry_id: str) -> None:
        super().__init__(4001, "문의를 찾을 수 없습니다.", 404, data={"inquiry_id": inquiry_id})


class InquiryAccessDeniedError(AppError):
    def __init__(self, message: str = "문의를 볼 권한이 없습니다.") -> None:
        super().__init__(4002, message, 403)


class SelfInquiryError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "본인의 상품에는 문의할 수 없습니다.", 422)


class DuplicateInquiryError(AppError):
    def __init__(self) -> None:
        super().__init__(4004, "이미 진행중인 문의가 있습니다.", 409)


class InquiryNotActiveError(AppError):
    def __init__(self) -> None:
        super().__init__(4005, "종료된 문의에는 메시지를 보낼 수 없습니다.", 422)


class InquiryTransitionForbiddenError(AppError):
    def __init__(self) -> None:
        super().__init__(4006, "문의 상태를 변경할 권한이 없습니다.", 403)


class InvalidInquiryTransitionError(AppError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            4007,
            f"'{current}' 상태의 문의는 '{target}' 상태로 변경할 수 없습니다.",
            422,
        )


class InquiryConflictError(AppError):
    def __init__(self, inquiry_id: str) -> None:
        super().__init__(
            4008,
            "다른 요청이 먼저 문의 상태를 변경했습니다. 새로고침 후 다시 시도해주세요.",
            409,
            data={"inquiry_id": inquiry_id},
        )


class MessageRateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(
            4009,
            "메시지를 너무 빠르게 전송하고 있습니다. 잠시 후 다시 시도해주세요.",
            429,
        )


# --- 5xxx: Community ---

class PostNotFoundError(AppError):
    def __init__(self, post_id: str) -> None:
        super().__init__(5001, "게시글을 찾을 수 없습니다.", 404, data={"post_id": post_id})


class PostAccessDeniedError(AppError):
    def __init__(self, message: str = "수정 권한이 없습니다.") -> None:
        super().__init__(5002, message, 403)


class CommentNotFoundError(AppError):
    def __init__(self, comment_id: str) -> None:
        super().__init__(5003, "댓글을 찾을 수 없습니다.", 404, data={"comment_id": comment_id})


# --- 6xxx: Geo ---

class InvalidCoordinatesError(AppError):
    def __init__(self) -> None:
        super().__init__(6001, "좌표가 올바르지 않습니다.", 422)


class RegionTableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6002, f"지역 정보를 불러올 수 없습니다: {detail}", 500)


# --- 7xxx: Studio ---

class StudioNotFoundError(AppError):
    def __init__(self, studio_id: str) -> None:
        super().__init__(7001, "스튜디오를 찾을 수 없습니다.", 404, data={"studio_id": studio_id})


class StudioAccessDeniedError(AppError):
    def __init__(self, message: str = "수정 권한이 없습니다.") -> None:
        super().__init__(7002, message, 403)


class InvalidStudioStatusError(AppError):
    def __init__(self, status: str) -> None:
        super().__init__(7003, f"올바르지 않은 운영 상태입니다: {status}", 422)


# --- 8xxx: Notification ---

class NotificationNotFoundError(AppError):
    def __init__(self, notification_id: str) -> None:
        super().__init__(
            8001, "알림을 찾을 수 없습니다.", 404, data={"notification_id": notification_id}
        )


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "요청을 처리하는 중 오류가 발생했습니다.") -> None:
        super().__init__(9002, detail, 500)
