"""Advisory payload validation.

``is_valid_item_data`` / ``is_valid_studio_data`` never raise: they report
every violated rule so a client can show them all at once. The ``parse_*``
variants are what services call before a write; they raise
``PayloadValidationError`` carrying the same message list.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from src.sc_common.errors import PayloadValidationError
from src.sc_validation.schemas import (
    COMMENT_REQUIRED_MESSAGES,
    ITEM_REQUIRED_MESSAGES,
    POST_REQUIRED_MESSAGES,
    STUDIO_REQUIRED_MESSAGES,
    CreateCommentData,
    CreateItemData,
    CreatePostData,
    CreateStudioData,
    UpdatePostData,
    error_messages,
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _parse(model: type[BaseModel], payload: Any, required: dict[str, str]) -> BaseModel:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise PayloadValidationError(error_messages(exc, required)) from exc


def _check(model: type[BaseModel], payload: Any, required: dict[str, str]) -> ValidationResult:
    try:
        model.model_validate(payload)
    except ValidationError as exc:
        return ValidationResult(valid=False, errors=error_messages(exc, required))
    return ValidationResult(valid=True)


def is_valid_item_data(payload: Any) -> ValidationResult:
    return _check(CreateItemData, payload, ITEM_REQUIRED_MESSAGES)


def is_valid_studio_data(payload: Any) -> ValidationResult:
    return _check(CreateStudioData, payload, STUDIO_REQUIRED_MESSAGES)


def parse_item_data(payload: Any) -> CreateItemData:
    return _parse(CreateItemData, payload, ITEM_REQUIRED_MESSAGES)  # type: ignore[return-value]


def parse_studio_data(payload: Any) -> CreateStudioData:
    return _parse(CreateStudioData, payload, STUDIO_REQUIRED_MESSAGES)  # type: ignore[return-value]


def parse_post_data(payload: Any) -> CreatePostData:
    return _parse(CreatePostData, payload, POST_REQUIRED_MESSAGES)  # type: ignore[return-value]


def parse_post_update(payload: Any) -> UpdatePostData:
    return _parse(UpdatePostData, payload, POST_REQUIRED_MESSAGES)  # type: ignore[return-value]


def parse_comment_data(payload: Any) -> CreateCommentData:
    return _parse(CreateCommentData, payload, COMMENT_REQUIRED_MESSAGES)  # type: ignore[return-value]
