"""Simulated payment of a pending booking."""
from __future__ import annotations

import logging
import time

from .events import publish_event
from .exceptions import RemoteOperationError, ValidationError
from .models import Booking, BookingStatus, Payment, PaymentMethod, PaymentStatus
from .receipts import GENERATE_RECEIPT
from .store import TableStore

logger = logging.getLogger(__name__)


def new_transaction_id() -> str:
    return f"TXN-{int(time.time() * 1000)}"


def process_payment(store: TableStore, booking: Booking, requester_id: int, method: PaymentMethod) -> Payment:
    """Record a completed payment, confirm the booking and request its receipt."""
    if booking.user_id != requester_id:
        raise ValidationError("booking_id", "Booking does not belong to the current user")
    if booking.status != BookingStatus.PENDING:
        raise ValidationError("booking_id", f"Booking is {booking.status.value} and cannot be paid")

    payment = store.insert(
        Payment,
        {
            "booking_id": booking.id,
            "user_id": requester_id,
            "amount": booking.total_amount,
            "payment_method": method,
            "status": PaymentStatus.COMPLETED,
            "transaction_id": new_transaction_id(),
        },
    )
    store.update(Booking, {"status": BookingStatus.CONFIRMED}, filters={"id": booking.id})

    try:
        store.invoke(GENERATE_RECEIPT, {"payment_id": payment.id})
    except RemoteOperationError as exc:
        logger.error("Error generating receipt for payment %s: %s", payment.id, exc.message)
    store.db.refresh(payment)

    logger.info("Payment %s completed for booking %s via %s", payment.id, booking.id, method.value)
    publish_event(
        "payment_completed",
        {
            "payment_id": payment.id,
            "booking_id": booking.id,
            "user_id": requester_id,
            "amount": str(payment.amount),
            "payment_method": method.value,
        },
    )
    return payment
