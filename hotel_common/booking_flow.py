"""Booking submission: validate a draft, price it, persist the booking and its services."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Union

from .events import publish_event
from .exceptions import RemoteOperationError, ValidationError
from .models import AdditionalService, Booking, BookingServiceLink, BookingStatus, Room
from .pricing import calculate_total
from .store import TableStore

logger = logging.getLogger(__name__)


@dataclass
class BookingDraft:
    check_in: Union[date, str, None]
    check_out: Union[date, str, None]
    guests: Optional[int] = 1
    service_ids: Sequence[int] = field(default_factory=list)
    special_requests: str = ""


@dataclass
class BookingSubmission:
    booking: Booking
    service_links: List[BookingServiceLink]

    @property
    def payment_path(self) -> str:
        return f"/payments/{self.booking.id}"


def _coerce_date(field_name: str, value: Union[date, str, None], missing_message: str) -> date:
    if value is None or value == "":
        raise ValidationError(field_name, missing_message)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(field_name, f"Invalid date: {value}") from None


def validate_draft(draft: BookingDraft) -> tuple[date, date, int]:
    """Structural checks; raises on the first offending field."""
    check_in = _coerce_date("check_in", draft.check_in, "Select a check-in date")
    check_out = _coerce_date("check_out", draft.check_out, "Select a check-out date")
    if check_out <= check_in:
        raise ValidationError("check_out", "Check-out date must be after check-in date")
    if draft.guests is None or draft.guests < 1:
        raise ValidationError("guests", "There must be at least 1 guest")
    return check_in, check_out, draft.guests


def _selected_services(store: TableStore, service_ids: Sequence[int]) -> List[AdditionalService]:
    wanted = list(dict.fromkeys(service_ids))
    if not wanted:
        return []
    found = store.select(AdditionalService, filters={"id": wanted, "active": True})
    by_id = {service.id: service for service in found}
    missing = [service_id for service_id in wanted if service_id not in by_id]
    if missing:
        raise ValidationError(
            "services",
            "Unknown or inactive additional services: " + ", ".join(str(i) for i in missing),
        )
    return [by_id[service_id] for service_id in wanted]


def submit_booking(store: TableStore, draft: BookingDraft, room: Room, requester_id: int) -> BookingSubmission:
    check_in, check_out, guests = validate_draft(draft)
    if guests > room.capacity:
        raise ValidationError("guests", f"{room.name} accepts at most {room.capacity} guests")
    services = _selected_services(store, draft.service_ids)

    total = calculate_total(room.price_per_night, check_in, check_out, [s.price for s in services])

    booking = store.insert(
        Booking,
        {
            "user_id": requester_id,
            "room_id": room.id,
            "check_in": check_in,
            "check_out": check_out,
            "guests": guests,
            "total_amount": total,
            "special_requests": draft.special_requests or None,
            "status": BookingStatus.PENDING,
        },
    )

    links: List[BookingServiceLink] = []
    if services:
        try:
            links = store.insert(
                BookingServiceLink,
                [{"booking_id": booking.id, "service_id": s.id, "quantity": 1} for s in services],
            )
        except RemoteOperationError:
            # The booking row stays behind without its services.
            logger.error("Booking %s was stored but its services could not be attached", booking.id)
            raise

    logger.info(
        "Booking %s created for user %s: room=%s stay=%s..%s total=%s services=%d",
        booking.id,
        requester_id,
        room.id,
        check_in,
        check_out,
        total,
        len(links),
    )
    publish_event(
        "booking_created",
        {
            "booking_id": booking.id,
            "user_id": requester_id,
            "room_id": room.id,
            "check_in": check_in.isoformat(),
            "check_out": check_out.isoformat(),
            "total_amount": str(total),
        },
    )
    return BookingSubmission(booking=booking, service_links=links)
