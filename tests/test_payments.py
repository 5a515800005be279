from decimal import Decimal

import pytest

from hotel_common.exceptions import RemoteOperationError
from hotel_common.models import Room, RoomType
from hotel_common.receipts import DEFAULT_HOOKS, GENERATE_RECEIPT


@pytest.fixture()
def pending_booking(db_session, bookings_client, client_headers) -> int:
    room = Room(name="Deluxe Single", type=RoomType.SINGLE, price_per_night=Decimal("180.00"), capacity=1)
    db_session.add(room)
    db_session.commit()
    response = bookings_client.post(
        "/bookings",
        json={"room_id": room.id, "check_in": "2025-03-10", "check_out": "2025-03-12", "guests": 1},
        headers=client_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["booking"]["id"]


def test_checkout_summary_for_owner_only(payments_client, register, client_headers, pending_booking):
    summary = payments_client.get(f"/payments/{pending_booking}", headers=client_headers)
    assert summary.status_code == 200
    assert summary.json()["room"]["name"] == "Deluxe Single"
    assert Decimal(summary.json()["total_amount"]) == Decimal("360.00")

    other_headers = register("other@example.com")
    assert payments_client.get(f"/payments/{pending_booking}", headers=other_headers).status_code == 404


def test_payment_confirms_booking_and_generates_receipt(
    payments_client, bookings_client, client_headers, pending_booking
):
    response = payments_client.post(
        "/payments",
        json={"booking_id": pending_booking, "payment_method": "yape"},
        headers=client_headers,
    )
    assert response.status_code == 201, response.text
    payment = response.json()
    assert payment["status"] == "completed"
    assert payment["payment_method"] == "yape"
    assert Decimal(payment["amount"]) == Decimal("360.00")
    assert payment["transaction_id"].startswith("TXN-")
    assert payment["receipt_url"].endswith(f"{payment['transaction_id']}.pdf")

    booking = bookings_client.get(f"/bookings/{pending_booking}", headers=client_headers).json()
    assert booking["status"] == "confirmed"
    assert booking["payments"][0]["status"] == "completed"

    listing = payments_client.get("/payments", headers=client_headers)
    assert [entry["id"] for entry in listing.json()] == [payment["id"]]


def test_confirmed_booking_cannot_be_paid_twice(payments_client, client_headers, pending_booking):
    body = {"booking_id": pending_booking, "payment_method": "card_bcp"}
    assert payments_client.post("/payments", json=body, headers=client_headers).status_code == 201

    again = payments_client.post("/payments", json=body, headers=client_headers)
    assert again.status_code == 422
    assert again.json()["field"] == "booking_id"


def test_payment_of_someone_elses_booking_is_rejected(payments_client, register, pending_booking):
    other_headers = register("other@example.com")
    response = payments_client.post(
        "/payments",
        json={"booking_id": pending_booking, "payment_method": "plin"},
        headers=other_headers,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "booking_id"


def test_unknown_booking_and_payment_method(payments_client, client_headers, pending_booking):
    missing = payments_client.post(
        "/payments", json={"booking_id": 9999, "payment_method": "yape"}, headers=client_headers
    )
    assert missing.status_code == 404

    bad_method = payments_client.post(
        "/payments", json={"booking_id": pending_booking, "payment_method": "cash"}, headers=client_headers
    )
    assert bad_method.status_code == 422


def test_receipt_failure_does_not_fail_the_payment(monkeypatch, payments_client, client_headers, pending_booking):
    def broken_receipt(db, payload):
        raise RemoteOperationError("receipt service unavailable")

    monkeypatch.setitem(DEFAULT_HOOKS, GENERATE_RECEIPT, broken_receipt)
    response = payments_client.post(
        "/payments",
        json={"booking_id": pending_booking, "payment_method": "card_bbva"},
        headers=client_headers,
    )
    assert response.status_code == 201
    assert response.json()["status"] == "completed"
    assert response.json()["receipt_url"] is None
