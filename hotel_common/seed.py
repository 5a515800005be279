"""Default catalogue of rooms and additional services."""
from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from .models import AdditionalService, Room, RoomStatus, RoomType

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    ("Buffet breakfast", "Full breakfast buffet with local and international options", "35.00", "UtensilsCrossed"),
    ("Airport transfer", "Private transport to or from the airport", "80.00", "Plane"),
    ("Spa and massage", "Spa session with a relaxing 60 minute massage", "150.00", "Sparkles"),
    ("Late check-out", "Check-out extended until 18:00", "50.00", "Clock"),
    ("Romantic dinner", "Private dinner for two with a panoramic view", "200.00", "Heart"),
    ("Guided tour", "City tour with a professional guide", "120.00", "Map"),
]

DEFAULT_ROOMS = [
    (
        "Presidential Suite Ocean View",
        RoomType.PRESIDENTIAL,
        "850.00",
        "Two-storey suite with sea view, private jacuzzi and 24/7 butler service",
        4,
        ["WiFi", 'TV 65"', "Minibar", "Jacuzzi", "Sea view", "Private balcony", "Butler"],
    ),
    (
        "Executive Suite",
        RoomType.SUITE,
        "450.00",
        "Elegant suite with living area, executive desk and premium amenities",
        3,
        ["WiFi", 'TV 55"', "Minibar", "Living area", "Desk", "Coffee maker"],
    ),
    (
        "Superior Double Room",
        RoomType.DOUBLE,
        "280.00",
        "Comfortable double room with two queen beds and balcony",
        2,
        ["WiFi", 'TV 43"', "Minibar", "Balcony", "Safe"],
    ),
    (
        "Deluxe Single Room",
        RoomType.SINGLE,
        "180.00",
        "Single room with every comfort for business travellers",
        1,
        ["WiFi", 'TV 43"', "Desk", "Coffee maker", "Iron"],
    ),
    (
        "Family Suite",
        RoomType.SUITE,
        "520.00",
        "Spacious suite with two connected bedrooms, ideal for families",
        5,
        ["WiFi", 'TV 55"', "Minibar", "Kitchenette", "Living area", "Balcony"],
    ),
    (
        "Standard Double Room",
        RoomType.DOUBLE,
        "220.00",
        "Classic double room with city view",
        2,
        ["WiFi", 'TV 43"', "Minibar", "Safe"],
    ),
]


def seed_catalog(db: Session) -> dict[str, int]:
    """Insert the default catalogue into empty tables; returns the number of rows added per table."""
    added = {"additional_services": 0, "rooms": 0}
    if db.query(AdditionalService).first() is None:
        for name, description, price, icon in DEFAULT_SERVICES:
            db.add(AdditionalService(name=name, description=description, price=Decimal(price), icon=icon))
            added["additional_services"] += 1
    if db.query(Room).first() is None:
        for name, room_type, price, description, capacity, amenities in DEFAULT_ROOMS:
            db.add(
                Room(
                    name=name,
                    type=room_type,
                    price_per_night=Decimal(price),
                    description=description,
                    capacity=capacity,
                    status=RoomStatus.AVAILABLE,
                    amenities=amenities,
                )
            )
            added["rooms"] += 1
    db.commit()
    logger.info("Catalogue seeded: %s", added)
    return added
