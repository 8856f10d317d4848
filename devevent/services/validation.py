"""
Event validation run before every write.

``validate_event`` is the single validation step of the save path: it trims
text fields, normalizes the date, checks the time, and reports every failing
field at once instead of stopping at the first problem.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Mapping

from devevent.schemas.event import EventMode
from devevent.services.slug_service import base_slug
from devevent.utils.lists import clean_string_list, coerce_string_list

TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):[0-5]\d", re.ASCII)

# Written forms accepted besides ISO 8601
DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
)

REQUIRED_TEXT_FIELDS = {
    "title": "Event title is required",
    "description": "Event description is required",
    "overview": "Event overview is required",
    "venue": "Venue is required",
    "location": "Location is required",
    "audience": "Target audience is required",
    "organizer": "Organizer is required",
}

MIN_TITLE_LENGTH = 3


def normalize_date(value: str) -> str:
    """Return ``value`` as YYYY-MM-DD or raise ValueError"""
    text = (value or "").strip()
    if not text:
        raise ValueError("empty date")

    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date().isoformat()

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    raise ValueError(f"unrecognized date: {value!r}")


def is_valid_time(value: str) -> bool:
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


@dataclass
class ValidationResult:
    """Cleaned values plus a field -> message map of failures"""
    values: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def validate_event(fields: Mapping[str, Any], require_image: bool = True) -> ValidationResult:
    """Validate and normalize the user-editable fields of an event"""
    result = ValidationResult()
    values, errors = result.values, result.errors

    for name, message in REQUIRED_TEXT_FIELDS.items():
        raw = fields.get(name)
        text = raw.strip() if isinstance(raw, str) else ""
        if not text:
            errors[name] = message
        values[name] = text

    title = values["title"]
    if title and len(title) < MIN_TITLE_LENGTH:
        errors["title"] = f"Title must be at least {MIN_TITLE_LENGTH} characters"
    elif title and not base_slug(title).strip("-"):
        errors["title"] = "Title must contain at least one letter or digit"

    image = fields.get("image")
    values["image"] = image.strip() if isinstance(image, str) else ""
    if require_image and not values["image"]:
        errors["image"] = "Event image is required"

    try:
        values["date"] = normalize_date(fields.get("date") or "")
    except ValueError:
        errors["date"] = "Date must be a valid date string"

    time_value = fields.get("time") or ""
    values["time"] = time_value
    if not is_valid_time(time_value):
        errors["time"] = "Time must be in HH:mm format (24-hour)"

    mode = fields.get("mode")
    mode = mode.strip().lower() if isinstance(mode, str) else mode
    try:
        values["mode"] = EventMode(mode).value
    except ValueError:
        errors["mode"] = "Mode must be online, offline, or hybrid"

    values["agenda"] = clean_string_list(coerce_string_list(fields.get("agenda")))
    if not values["agenda"]:
        errors["agenda"] = "Agenda must contain at least one item"

    values["tags"] = clean_string_list(coerce_string_list(fields.get("tags")), unique=True)
    if not values["tags"]:
        errors["tags"] = "At least one tag is required"

    return result
