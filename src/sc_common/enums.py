"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class ProductCategory(str, Enum):
    SHOES = "shoes"
    CLOTHING = "clothing"
    ACCESSORIES = "accessories"
    OTHER = "other"


class ItemStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    HIDDEN = "hidden"


class ProductCondition(str, Enum):
    NEW = "new"
    LIKE_NEW = "like_new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class TradeMethod(str, Enum):
    DIRECT = "direct"
    DELIVERY = "delivery"
    BOTH = "both"


class Gender(str, Enum):
    UNISEX = "unisex"
    MALE = "male"
    FEMALE = "female"


class ItemSortOption(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    POPULAR = "popular"


class StudioCategory(str, Enum):
    STUDIO = "studio"
    PRACTICE_ROOM = "practice_room"
    CLUB = "club"
    PUBLIC_SPACE = "public_space"
    CAFE = "cafe"


class StudioStatus(str, Enum):
    ACTIVE = "active"
    TEMPORARILY_CLOSED = "temporarily_closed"
    PERMANENTLY_CLOSED = "permanently_closed"


class StudioPriceType(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"
    DROP_IN = "drop_in"


class InquiryStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REPORTED = "reported"


class ActorRole(str, Enum):
    """Who is asking for an inquiry transition, relative to that inquiry."""
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class InquiryMessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    PRICE_PROPOSAL = "price_proposal"
    SYSTEM = "system"


class InquirySortOption(str, Enum):
    LATEST = "latest"
    OLDEST = "oldest"
    UNREAD_FIRST = "unread_first"


class PostCategory(str, Enum):
    GENERAL = "general"
    QNA = "qna"
    EVENT = "event"
    MARKETPLACE = "marketplace"
    LESSON = "lesson"
    REVIEW = "review"


class PostStatus(str, Enum):
    ACTIVE = "active"
    HIDDEN = "hidden"
    DELETED = "deleted"
    REPORTED = "reported"


class NotificationType(str, Enum):
    NEW_COMMENT = "new_comment"
    COMMENT_REPLY = "comment_reply"
    COMMENT_LIKE = "comment_like"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


# Korean display labels
PRODUCT_CATEGORY_LABELS = {
    ProductCategory.SHOES: "댄스화",
    ProductCategory.CLOTHING: "의상",
    ProductCategory.ACCESSORIES: "액세서리",
    ProductCategory.OTHER: "기타",
}

ITEM_STATUS_LABELS = {
    ItemStatus.AVAILABLE: "판매중",
    ItemStatus.RESERVED: "예약중",
    ItemStatus.SOLD: "판매완료",
    ItemStatus.HIDDEN: "숨김",
}

INQUIRY_STATUS_LABELS = {
    InquiryStatus.ACTIVE: "진행중",
    InquiryStatus.COMPLETED: "완료",
    InquiryStatus.CANCELLED: "취소",
    InquiryStatus.REPORTED: "신고됨",
}

POST_CATEGORY_LABELS = {
    PostCategory.GENERAL: "자유",
    PostCategory.QNA: "질문",
    PostCategory.EVENT: "이벤트",
    PostCategory.MARKETPLACE: "장터",
    PostCategory.LESSON: "강습",
    PostCategory.REVIEW: "후기",
}

STUDIO_CATEGORY_LABELS = {
    StudioCategory.STUDIO: "댄스 스튜디오",
    StudioCategory.PRACTICE_ROOM: "연습실",
    StudioCategory.CLUB: "클럽/바",
    StudioCategory.PUBLIC_SPACE: "공공장소",
    StudioCategory.CAFE: "카페",
}

STUDIO_STATUS_LABELS = {
    StudioStatus.ACTIVE: "운영 중",
    StudioStatus.TEMPORARILY_CLOSED: "임시 휴업",
    StudioStatus.PERMANENTLY_CLOSED: "영구 폐업",
}

NOTIFICATION_TYPE_LABELS = {
    NotificationType.NEW_COMMENT: "새 댓글",
    NotificationType.COMMENT_REPLY: "댓글 답글",
    NotificationType.COMMENT_LIKE: "댓글 좋아요",
    NotificationType.SYSTEM: "시스템 알림",
}
