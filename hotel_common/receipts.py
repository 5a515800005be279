"""Server-side receipt generation invoked after a payment completes."""
from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from .config import get_settings
from .exceptions import RemoteOperationError
from .models import Payment

logger = logging.getLogger(__name__)

GENERATE_RECEIPT = "generate-receipt"


def generate_receipt(db: Session, payload: Dict[str, Any]) -> Dict[str, str]:
    payment_id = payload.get("payment_id")
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if payment is None:
        raise RemoteOperationError(f"Payment {payment_id} not found")

    base_url = get_settings().receipt_base_url.rstrip("/")
    payment.receipt_url = f"{base_url}/{payment.transaction_id or payment.id}.pdf"
    db.commit()
    logger.info("Receipt generated for payment %s", payment.id)
    return {"receipt_url": payment.receipt_url}


DEFAULT_HOOKS = {GENERATE_RECEIPT: generate_receipt}
