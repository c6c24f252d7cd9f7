"""Strip markup-ish fragments from user text before it is stored."""

import re
from typing import Any

from src.sc_validation.schemas import CreateItemData, CreateStudioData
from src.sc_validation.validators import parse_item_data, parse_studio_data

_UNSAFE_CHARS = re.compile(r"[<>\"']")
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def sanitize_input(text: str) -> str:
    text = _UNSAFE_CHARS.sub("", text)
    text = _JS_SCHEME.sub("", text)
    text = _EVENT_HANDLER.sub("", text)
    return text.strip()


def _clean_list(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [cleaned for cleaned in (sanitize_input(v) for v in values) if cleaned]


def sanitize_item_data(data: CreateItemData) -> CreateItemData:
    """Copy of ``data`` with every free-text field passed through sanitize_input."""
    pricing = data.pricing
    if pricing.notes is not None:
        pricing = pricing.model_copy(update={"notes": sanitize_input(pricing.notes)})

    specs_update = {
        name: sanitize_input(value)
        for name in ("brand", "size", "color", "material")
        if (value := getattr(data.specs, name)) is not None
    }
    if data.specs.features is not None:
        specs_update["features"] = _clean_list(data.specs.features)

    location_update: dict[str, object] = {"region": sanitize_input(data.location.region)}
    if data.location.district is not None:
        location_update["district"] = sanitize_input(data.location.district)
    if data.location.preferred_meeting_places is not None:
        location_update["preferred_meeting_places"] = _clean_list(
            data.location.preferred_meeting_places
        )

    return data.model_copy(update={
        "title": sanitize_input(data.title),
        "description": sanitize_input(data.description),
        "pricing": pricing,
        "specs": data.specs.model_copy(update=specs_update),
        "location": data.location.model_copy(update=location_update),
        "tags": _clean_list(data.tags) or [],
    })


def clean_item_data(payload: Any) -> CreateItemData:
    """Validate, sanitize, then validate again.

    Sanitizing can empty a field that passed the first check (a title of
    ``"<>"``), so the stored shape is re-checked before any write.
    """
    data = sanitize_item_data(parse_item_data(payload))
    return parse_item_data(data.model_dump(mode="json", by_alias=True, exclude_none=True))


def _clean_fields(model: Any, names: tuple[str, ...]) -> dict[str, Any]:
    update: dict[str, Any] = {}
    for name in names:
        value = getattr(model, name)
        if isinstance(value, str):
            update[name] = sanitize_input(value)
        elif isinstance(value, list):
            update[name] = _clean_list(value)
    return update


def sanitize_studio_data(data: CreateStudioData) -> CreateStudioData:
    """Copy of ``data`` with every free-text field passed through sanitize_input.

    Contact email, phone and website keep their own format rules and are left alone.
    """
    update: dict[str, Any] = {
        "name": sanitize_input(data.name),
        "location": data.location.model_copy(update=_clean_fields(
            data.location, ("address", "address_detail", "region", "district", "subway", "landmarks")
        )),
        "tags": _clean_list(data.tags) or [],
    }
    if data.description is not None:
        update["description"] = sanitize_input(data.description)
    if data.contact is not None:
        update["contact"] = data.contact.model_copy(
            update=_clean_fields(data.contact, ("kakao_talk", "instagram", "booking"))
        )
    if data.pricing is not None:
        update["pricing"] = data.pricing.model_copy(update=_clean_fields(data.pricing, ("notes",)))
    if data.facilities is not None:
        update["facilities"] = data.facilities.model_copy(
            update=_clean_fields(data.facilities, ("floor_type", "equipment", "amenities"))
        )
    if data.operating_hours is not None:
        hours = data.operating_hours
        update["operating_hours"] = hours.model_copy(
            update=_clean_fields(hours, tuple(type(hours).model_fields))
        )
    return data.model_copy(update=update)


def clean_studio_data(payload: Any) -> CreateStudioData:
    data = sanitize_studio_data(parse_studio_data(payload))
    return parse_studio_data(data.model_dump(mode="json", by_alias=True, exclude_none=True))
