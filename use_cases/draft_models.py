"""Draft Event aggregate authored by the create-event workflow, plus field validation."""

import base64
import math
import mimetypes
import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

CATEGORIES = ("music", "sports", "arts", "technology", "food", "business", "other")
SCALAR_FIELDS = ("title", "description", "category", "date", "time")
LOCATION_FIELDS = ("address", "city", "state", "country")
TIER_FIELDS = ("name", "price", "quantity", "description")

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMATS = ("%H:%M", "%H:%M:%S")

FieldErrors = Dict[str, str]


@dataclass
class Location:
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""


@dataclass
class TicketTier:
    # Raw form values; parse_price/parse_quantity turn them into numbers.
    name: str = ""
    price: Any = ""
    quantity: Any = ""
    description: str = ""


@dataclass(frozen=True)
class PendingMedia:
    """Local-only media awaiting upload; never sent as-is."""

    local_handle: str
    preview_ref: str
    filename: str
    content_type: str
    content: bytes = field(repr=False)


def _media_source(item: Any) -> Tuple[str, bytes, Optional[str]]:
    # Streamlit's UploadedFile exposes name/type/getvalue()
    if hasattr(item, "getvalue"):
        return item.name, item.getvalue(), getattr(item, "type", None)
    filename, content, *rest = item
    return filename, content, rest[0] if rest else None


def make_pending_media(filename: str, content: bytes, content_type: Optional[str] = None) -> PendingMedia:
    content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    encoded = base64.b64encode(content).decode("ascii")
    return PendingMedia(
        local_handle=uuid.uuid4().hex,
        preview_ref=f"data:{content_type};base64,{encoded}",
        filename=filename,
        content_type=content_type,
        content=content,
    )


@dataclass
class DraftEvent:
    title: str = ""
    description: str = ""
    category: str = ""
    date: str = ""
    time: str = ""
    location: Location = field(default_factory=Location)
    ticket_tiers: List[TicketTier] = field(default_factory=lambda: [TicketTier()])
    pending_media: List[PendingMedia] = field(default_factory=list)

    def set_field(self, path: str, value: Any) -> None:
        """Set `title` or a nested `location.city`-style path; other fields are untouched."""
        parent, _, child = path.partition(".")
        if child:
            if parent != "location" or child not in LOCATION_FIELDS:
                raise KeyError(f"Unknown draft field: {path}")
            setattr(self.location, child, value)
            return
        if parent not in SCALAR_FIELDS:
            raise KeyError(f"Unknown draft field: {path}")
        if parent == "date" and isinstance(value, date):
            value = value.strftime(DATE_FORMAT)
        elif parent == "time" and isinstance(value, time):
            value = value.strftime("%H:%M")
        setattr(self, parent, value)

    def add_tier(self) -> TicketTier:
        tier = TicketTier()
        self.ticket_tiers.append(tier)
        return tier

    def remove_tier(self, index: int) -> bool:
        """Removing the sole remaining tier is a no-op and returns False."""
        if len(self.ticket_tiers) <= 1:
            return False
        del self.ticket_tiers[index]
        return True

    def update_tier(self, index: int, field_name: str, value: Any) -> None:
        if field_name not in TIER_FIELDS:
            raise KeyError(f"Unknown tier field: {field_name}")
        setattr(self.ticket_tiers[index], field_name, value)

    def add_media(self, items: Iterable[Any]) -> List[PendingMedia]:
        added = [make_pending_media(*_media_source(item)) for item in items]
        self.pending_media.extend(added)
        return added

    def remove_media(self, index: int) -> PendingMedia:
        return self.pending_media.pop(index)


# --- validation ---

def _blank(value: Any) -> bool:
    return not str(value or "").strip()


def parse_price(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError("Price must be a number")
    price = float(str(value).strip())
    if not math.isfinite(price) or price < 0:
        raise ValueError("Price must be zero or more")
    return price


def parse_quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("Quantity must be a whole number")
    if isinstance(value, int):
        quantity = value
    elif isinstance(value, float) and value.is_integer():
        quantity = int(value)
    else:
        quantity = int(str(value).strip())
    if quantity < 1:
        raise ValueError("Quantity must be at least 1")
    return quantity


def parse_time(value: str) -> time:
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised time: {value!r}")


def validate_basic_info(draft: DraftEvent) -> FieldErrors:
    errors = {}
    if _blank(draft.title):
        errors["title"] = "Title is required"
    if _blank(draft.description):
        errors["description"] = "Description is required"
    if _blank(draft.category):
        errors["category"] = "Category is required"
    elif draft.category not in CATEGORIES:
        errors["category"] = f"Category must be one of: {', '.join(CATEGORIES)}"
    return errors


def validate_location_and_date(draft: DraftEvent) -> FieldErrors:
    errors = {}
    if _blank(draft.date):
        errors["date"] = "Date is required"
    else:
        try:
            datetime.strptime(str(draft.date).strip(), DATE_FORMAT)
        except ValueError:
            errors["date"] = "Date must look like YYYY-MM-DD"
    if _blank(draft.time):
        errors["time"] = "Time is required"
    else:
        try:
            parse_time(str(draft.time))
        except ValueError:
            errors["time"] = "Time must look like HH:MM"
    for name in LOCATION_FIELDS:
        if _blank(getattr(draft.location, name)):
            errors[f"location.{name}"] = f"{name.capitalize()} is required"
    return errors


def validate_tickets(draft: DraftEvent) -> FieldErrors:
    errors = {}
    if not draft.ticket_tiers:
        errors["ticketTiers"] = "At least one ticket tier is required"
    for i, tier in enumerate(draft.ticket_tiers):
        if _blank(tier.name):
            errors[f"ticketTiers[{i}].name"] = "Tier name is required"
        try:
            parse_price(tier.price)
        except ValueError:
            errors[f"ticketTiers[{i}].price"] = "Price must be a number, zero or more"
        try:
            parse_quantity(tier.quantity)
        except ValueError:
            errors[f"ticketTiers[{i}].quantity"] = "Quantity must be a whole number, at least 1"
    return errors


def validate_media(draft: DraftEvent) -> FieldErrors:
    errors = {}
    for i, media in enumerate(draft.pending_media):
        if not media.content_type.startswith("image/"):
            errors[f"images[{i}]"] = f"{media.filename} is not an image"
    return errors


def validate_draft(draft: DraftEvent) -> FieldErrors:
    errors = {}
    for validator in (validate_basic_info, validate_location_and_date, validate_tickets, validate_media):
        errors.update(validator(draft))
    return errors


# --- submission payload ---

def combined_timestamp(draft: DraftEvent) -> datetime:
    if _blank(draft.date) or _blank(draft.time):
        raise ValueError("Both date and time are required")
    day = datetime.strptime(str(draft.date).strip(), DATE_FORMAT).date()
    return datetime.combine(day, parse_time(str(draft.time)))


def build_event_payload(draft: DraftEvent, media_refs: Sequence[str]) -> Dict[str, Any]:
    """Wire payload for POST /events; media_refs are remote references in pendingMedia order."""
    return {
        "title": draft.title.strip(),
        "description": draft.description.strip(),
        "category": draft.category,
        "date": combined_timestamp(draft).isoformat(),
        "location": {k: str(v).strip() for k, v in asdict(draft.location).items()},
        "ticketTiers": [
            {
                "name": tier.name.strip(),
                "price": parse_price(tier.price),
                "quantity": parse_quantity(tier.quantity),
                "description": (tier.description or "").strip(),
            }
            for tier in draft.ticket_tiers
        ],
        "images": list(media_refs),
    }
