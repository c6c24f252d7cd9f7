"""Create-data schemas for marketplace items, studios, posts and comments.

These models are the single definition of what a well-formed payload is.
The same classes are used as typed request bodies by the services and,
through ``sc_validation.validators``, as the advisory checker that lists
every violated rule as a plain message such as
``"pricing.price cannot exceed 10,000,000 KRW"``.

Rule violations are raised as ``PydanticCustomError("rule_violation", ...)``
carrying only the predicate ("cannot exceed 10,000,000 KRW"); the field
path is prepended when errors are rendered. Missing fields and wrong
container types are rendered from the per-schema ``REQUIRED_MESSAGES``
tables below so that dropping one required field yields exactly one
message.

Client payloads are camelCase (``tradeMethod``); snake_case is accepted too.
"""

import math
import re
from collections.abc import Iterable, Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from src.sc_common.enums import (
    Gender,
    PostCategory,
    ProductCategory,
    ProductCondition,
    StudioCategory,
    TradeMethod,
)

MAX_ITEM_PRICE_KRW = 10_000_000
MAX_ORIGINAL_PRICE_KRW = 50_000_000
MAX_DELIVERY_FEE_KRW = 100_000
MAX_ITEM_IMAGES = 8
MAX_STUDIO_IMAGES = 10

REQUIRED_STRING = "is required and must be a non-empty string"
REQUIRED_TEXT = "is required and must be a string"
COORDINATES_NOT_NUMBERS = "must contain valid lat/lng numbers"
POSITIVE_NUMBER = "must be a positive number"
NON_NEGATIVE_NUMBER = "must be a non-negative number"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[\d\-+()\s]+$")
_YEAR_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def violation(rule: str, parent: bool = False) -> PydanticCustomError:
    """Rule failure for the current field (or, with ``parent``, its container)."""
    ctx: dict[str, Any] = {"rule": rule}
    if parent:
        ctx["scope"] = "parent"
    return PydanticCustomError("rule_violation", "{rule}", ctx)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def _member_of(value: Any, choices: Iterable[str]) -> bool:
    return isinstance(value, str) and value in set(choices)


def _values(enum_cls: Any) -> list[str]:
    return [member.value for member in enum_cls]


HTTPS_URL = "must be a valid HTTPS URL"


def _is_https_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("https://")


def _https_url(value: Any) -> Any:
    if not _is_https_url(value):
        raise violation(HTTPS_URL)
    return value


HttpsUrl = Annotated[str, BeforeValidator(_https_url)]


def camelize(value: Any) -> Any:
    """snake_case keys to camelCase, recursively, so patches merge onto stored documents."""
    if isinstance(value, dict):
        return {
            (to_camel(k) if isinstance(k, str) and "_" in k else k): camelize(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [camelize(v) for v in value]
    return value


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class CoordinatesIn(_Schema):
    lat: float
    lng: float

    @field_validator("lat", mode="before")
    @classmethod
    def _check_lat(cls, v: Any) -> Any:
        if not _is_number(v):
            raise violation(COORDINATES_NOT_NUMBERS, parent=True)
        if v < -90 or v > 90:
            raise violation("must be between -90 and 90")
        return v

    @field_validator("lng", mode="before")
    @classmethod
    def _check_lng(cls, v: Any) -> Any:
        if not _is_number(v):
            raise violation(COORDINATES_NOT_NUMBERS, parent=True)
        if v < -180 or v > 180:
            raise violation("must be between -180 and 180")
        return v


def _required_string(v: Any) -> Any:
    if not isinstance(v, str) or not v.strip():
        raise violation(REQUIRED_STRING)
    return v


def _optional_amount(v: Any, rule: str = NON_NEGATIVE_NUMBER) -> Any:
    if v is None:
        return v
    if not _is_number(v) or v < 0:
        raise violation(rule)
    return v


def _image_list(v: list[Any], limit: int) -> list[Any]:
    """Too many images is reported together with every bad URL in the list."""
    if len(v) <= limit:
        return v
    rules = [("", f"array cannot contain more than {limit} items")]
    rules += [(f"[{i}]", HTTPS_URL) for i, url in enumerate(v) if not _is_https_url(url)]
    raise PydanticCustomError("rule_violations", "{rule}", {"rule": rules[0][1], "rules": rules})


# ---------------------------------------------------------------------------
# Marketplace item
# ---------------------------------------------------------------------------


class ItemPricingIn(_Schema):
    price: float
    currency: Literal["KRW"]
    negotiable: bool = False
    trade_method: TradeMethod
    delivery_fee: float | None = None
    free_delivery: bool | None = None
    notes: str | None = Field(None, max_length=200)

    @field_validator("price", mode="before")
    @classmethod
    def _check_price(cls, v: Any) -> Any:
        if not _is_number(v) or v <= 0:
            raise violation(POSITIVE_NUMBER)
        if v > MAX_ITEM_PRICE_KRW:
            raise violation("cannot exceed 10,000,000 KRW")
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def _check_currency(cls, v: Any) -> Any:
        if v != "KRW":
            raise violation("must be KRW")
        return v

    @field_validator("trade_method", mode="before")
    @classmethod
    def _check_trade_method(cls, v: Any) -> Any:
        if not _member_of(v, _values(TradeMethod)):
            raise violation("must be direct, delivery, or both")
        return v

    @field_validator("delivery_fee", mode="before")
    @classmethod
    def _check_delivery_fee(cls, v: Any) -> Any:
        _optional_amount(v)
        if v is not None and v > MAX_DELIVERY_FEE_KRW:
            raise violation("cannot exceed 100,000 KRW")
        return v


class ItemSpecsIn(_Schema):
    condition: ProductCondition
    brand: str | None = Field(None, max_length=50)
    size: str | None = Field(None, max_length=20)
    color: str | None = Field(None, max_length=30)
    material: str | None = Field(None, max_length=50)
    purchase_date: str | None = None
    original_price: float | None = None
    gender: Gender | None = None
    features: list[Annotated[str, Field(max_length=20)]] | None = Field(None, max_length=10)

    @field_validator("condition", mode="before")
    @classmethod
    def _check_condition(cls, v: Any) -> Any:
        if not _member_of(v, _values(ProductCondition)):
            raise violation("must be a valid condition")
        return v

    @field_validator("purchase_date", mode="before")
    @classmethod
    def _check_purchase_date(cls, v: Any) -> Any:
        if v is not None and (not isinstance(v, str) or not _YEAR_MONTH_RE.match(v)):
            raise violation("must be in YYYY-MM format")
        return v

    @field_validator("original_price", mode="before")
    @classmethod
    def _check_original_price(cls, v: Any) -> Any:
        _optional_amount(v, POSITIVE_NUMBER)
        if v is not None and v == 0:
            raise violation(POSITIVE_NUMBER)
        if v is not None and v > MAX_ORIGINAL_PRICE_KRW:
            raise violation("cannot exceed 50,000,000 KRW")
        return v

    @field_validator("gender", mode="before")
    @classmethod
    def _check_gender(cls, v: Any) -> Any:
        if v is not None and not _member_of(v, _values(Gender)):
            raise violation("must be unisex, male, or female")
        return v


class ItemLocationIn(_Schema):
    region: str = Field(max_length=50)
    district: str | None = Field(None, max_length=100)
    preferred_meeting_places: list[Annotated[str, Field(max_length=50)]] | None = Field(
        None, max_length=5
    )
    delivery_available: bool = False
    coordinates: CoordinatesIn | None = None

    @field_validator("region", mode="before")
    @classmethod
    def _check_region(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v:
            raise violation(REQUIRED_TEXT)
        return v


class CreateItemData(_Schema):
    title: str = Field(max_length=100)
    description: str = Field(max_length=2000)
    category: ProductCategory
    pricing: ItemPricingIn
    specs: ItemSpecsIn
    location: ItemLocationIn
    images: list[HttpsUrl]
    tags: list[Annotated[str, Field(max_length=20)]] = Field(default_factory=list, max_length=10)
    keywords: list[str] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _check_text(cls, v: Any) -> Any:
        return _required_string(v)

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, v: Any) -> Any:
        if not _member_of(v, _values(ProductCategory)):
            raise violation("must be a valid product category")
        return v

    @field_validator("images", mode="before")
    @classmethod
    def _check_images(cls, v: Any) -> Any:
        if not isinstance(v, list) or not v:
            raise violation("is required and must be a non-empty array")
        return _image_list(v, MAX_ITEM_IMAGES)


# ---------------------------------------------------------------------------
# Studio
# ---------------------------------------------------------------------------


class StudioLocationIn(_Schema):
    address: str = Field(max_length=200)
    address_detail: str | None = Field(None, max_length=100)
    region: str = Field(max_length=50)
    district: str | None = Field(None, max_length=100)
    subway: list[Annotated[str, Field(max_length=30)]] | None = Field(None, max_length=5)
    landmarks: list[Annotated[str, Field(max_length=50)]] | None = Field(None, max_length=5)
    coordinates: CoordinatesIn

    @field_validator("address", "region", mode="before")
    @classmethod
    def _check_text(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v:
            raise violation(REQUIRED_TEXT)
        return v


class StudioContactIn(_Schema):
    email: str | None = None
    phone: str | None = None
    website: str | None = None
    kakao_talk: str | None = Field(None, max_length=100)
    instagram: str | None = Field(None, max_length=100)
    booking: str | None = Field(None, max_length=200)

    @field_validator("email", mode="before")
    @classmethod
    def _check_email(cls, v: Any) -> Any:
        if v and (not isinstance(v, str) or not _EMAIL_RE.match(v)):
            raise violation("must be a valid email address")
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def _check_phone(cls, v: Any) -> Any:
        if v and (not isinstance(v, str) or not _PHONE_RE.match(v)):
            raise violation("must contain only numbers, spaces, and phone formatting characters")
        return v

    @field_validator("website", mode="before")
    @classmethod
    def _check_website(cls, v: Any) -> Any:
        if v and (not isinstance(v, str) or not v.startswith("http")):
            raise violation("must be a valid URL starting with http or https")
        return v


class StudioPricingIn(_Schema):
    hourly: float | None = None
    daily: float | None = None
    monthly: float | None = None
    drop_in: float | None = None
    currency: str | None = None
    notes: str | None = Field(None, max_length=200)

    @field_validator("hourly", "daily", "monthly", "drop_in", mode="before")
    @classmethod
    def _check_amount(cls, v: Any) -> Any:
        return _optional_amount(v)

    @field_validator("currency", mode="before")
    @classmethod
    def _check_currency(cls, v: Any) -> Any:
        if v and v != "KRW":
            raise violation("must be KRW")
        return v


class StudioFacilitiesIn(_Schema):
    area: float | None = None
    capacity: int | None = None
    floor_type: str | None = Field(None, max_length=30)
    sound_system: bool | None = None
    air_conditioning: bool | None = None
    parking: bool | None = None
    wifi: bool | None = None
    shower: bool | None = None
    lockers: bool | None = None
    equipment: list[Annotated[str, Field(max_length=30)]] | None = Field(None, max_length=20)
    amenities: list[Annotated[str, Field(max_length=30)]] | None = Field(None, max_length=20)

    @field_validator("area", mode="before")
    @classmethod
    def _check_area(cls, v: Any) -> Any:
        if v is not None and (not _is_number(v) or v <= 0):
            raise violation(POSITIVE_NUMBER)
        return v

    @field_validator("capacity", mode="before")
    @classmethod
    def _check_capacity(cls, v: Any) -> Any:
        if v is None:
            return v
        if not _is_number(v) or v <= 0 or not float(v).is_integer():
            raise violation("must be a positive integer")
        return v


class OperatingHoursIn(_Schema):
    """Free-form per-day hours such as ``"09:00-22:00"`` or ``"closed"``."""

    monday: str | None = Field(None, max_length=50)
    tuesday: str | None = Field(None, max_length=50)
    wednesday: str | None = Field(None, max_length=50)
    thursday: str | None = Field(None, max_length=50)
    friday: str | None = Field(None, max_length=50)
    saturday: str | None = Field(None, max_length=50)
    sunday: str | None = Field(None, max_length=50)
    holidays: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=200)


class CreateStudioData(_Schema):
    name: str = Field(max_length=100)
    category: StudioCategory
    description: str | None = Field(None, max_length=2000)
    location: StudioLocationIn
    contact: StudioContactIn | None = None
    pricing: StudioPricingIn | None = None
    facilities: StudioFacilitiesIn | None = None
    operating_hours: OperatingHoursIn | None = None
    images: list[HttpsUrl] | None = None
    tags: list[Annotated[str, Field(max_length=20)]] = Field(default_factory=list, max_length=10)
    keywords: list[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v: Any) -> Any:
        return _required_string(v)

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, v: Any) -> Any:
        if not _member_of(v, _values(StudioCategory)):
            raise violation("must be a valid studio category")
        return v

    @field_validator("images", mode="before")
    @classmethod
    def _check_images(cls, v: Any) -> Any:
        if v is not None and not isinstance(v, list):
            raise violation("must be an array")
        return v if v is None else _image_list(v, MAX_STUDIO_IMAGES)


# ---------------------------------------------------------------------------
# Community
# ---------------------------------------------------------------------------


def _trimmed_required(v: Any) -> Any:
    _required_string(v)
    return v.strip()


class CreatePostData(_Schema):
    title: str = Field(max_length=100)
    content: str = Field(max_length=5000)
    category: PostCategory
    tags: list[Annotated[str, Field(max_length=20)]] = Field(default_factory=list, max_length=10)
    attachments: list[HttpsUrl] = Field(default_factory=list, max_length=10)

    @field_validator("title", "content", mode="before")
    @classmethod
    def _check_text(cls, v: Any) -> Any:
        return _trimmed_required(v)

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, v: Any) -> Any:
        if not _member_of(v, _values(PostCategory)):
            raise violation("must be a valid post category")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _clean_tags(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [t.strip() for t in v if not isinstance(t, str) or t.strip()]
        return v


class UpdatePostData(_Schema):
    title: str | None = Field(None, max_length=100)
    content: str | None = Field(None, max_length=5000)
    category: PostCategory | None = None
    tags: list[Annotated[str, Field(max_length=20)]] | None = Field(None, max_length=10)

    @field_validator("title", "content", mode="before")
    @classmethod
    def _check_text(cls, v: Any) -> Any:
        return v if v is None else _trimmed_required(v)

    @field_validator("category", mode="before")
    @classmethod
    def _check_category(cls, v: Any) -> Any:
        if v is not None and not _member_of(v, _values(PostCategory)):
            raise violation("must be a valid post category")
        return v


class CreateCommentData(_Schema):
    content: str = Field(max_length=1000)
    parent_id: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _check_content(cls, v: Any) -> Any:
        return _trimmed_required(v)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------


def _required_table(entries: Mapping[str, str]) -> dict[str, str]:
    return {path: f"{path} {rule}" for path, rule in entries.items()}


_COORDINATE_PATHS = {
    "location.coordinates": COORDINATES_NOT_NUMBERS,
    "location.coordinates.lat": COORDINATES_NOT_NUMBERS,
    "location.coordinates.lng": COORDINATES_NOT_NUMBERS,
}

ITEM_REQUIRED_MESSAGES = _required_table({
    "title": REQUIRED_STRING,
    "description": REQUIRED_STRING,
    "category": "must be a valid product category",
    "pricing": "is required",
    "pricing.price": POSITIVE_NUMBER,
    "pricing.currency": "must be KRW",
    "pricing.tradeMethod": "must be direct, delivery, or both",
    "specs": "is required",
    "specs.condition": "must be a valid condition",
    "location": "is required",
    "location.region": REQUIRED_TEXT,
    "images": "is required and must be a non-empty array",
})
# "location.coordinates.lat" must render as the container's message
ITEM_REQUIRED_MESSAGES.update(
    {path: f"location.coordinates {rule}" for path, rule in _COORDINATE_PATHS.items()}
)

STUDIO_REQUIRED_MESSAGES = _required_table({
    "name": REQUIRED_STRING,
    "category": "must be a valid studio category",
    "location": "is required",
    "location.address": REQUIRED_TEXT,
    "location.region": REQUIRED_TEXT,
})
STUDIO_REQUIRED_MESSAGES.update(
    {path: f"location.coordinates {rule}" for path, rule in _COORDINATE_PATHS.items()}
)

POST_REQUIRED_MESSAGES = _required_table({
    "title": REQUIRED_STRING,
    "content": REQUIRED_STRING,
    "category": "must be a valid post category",
})

COMMENT_REQUIRED_MESSAGES = _required_table({
    "content": REQUIRED_STRING,
})


def dotted_path(loc: tuple[int | str, ...]) -> str:
    """('images', 0) -> 'images[0]', ('pricing', 'price') -> 'pricing.price'"""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _render(err: Any, required: Mapping[str, str]) -> list[str]:
    loc = tuple(err["loc"])
    ctx = err.get("ctx") or {}
    kind = err["type"]

    if kind == "rule_violation":
        target = loc[:-1] if ctx.get("scope") == "parent" else loc
        return [f"{dotted_path(target)} {ctx['rule']}"]
    if kind == "rule_violations":
        return [f"{dotted_path(loc)}{suffix} {rule}" for suffix, rule in ctx["rules"]]
    if kind == "string_too_long":
        return [f"{dotted_path(loc)} must be {ctx['max_length']} characters or less"]
    if kind == "too_long":
        return [f"{dotted_path(loc)} array cannot contain more than {ctx['max_length']} items"]
    path = dotted_path(loc)
    if not path:
        return ["payload must be an object"]
    return [required.get(path, f"{path} is invalid")]


def error_messages(exc: ValidationError, required: Mapping[str, str]) -> list[str]:
    """Render every pydantic error as rule messages, in order, de-duplicated.

    ``rule_violations`` carries several (suffix, rule) pairs for one field,
    e.g. an image list that is both too long and holds a bad URL.
    """
    messages: list[str] = []
    for err in exc.errors():
        for message in _render(err, required):
            if message not in messages:
                messages.append(message)
    return messages
