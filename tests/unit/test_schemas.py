"""Unit tests for schema validation."""
from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from hotel_common.models import RoleEnum, RoomType, UserRole
from hotel_common.schemas import BookingCreate, ProfileCreate, ProfileRead, ProfileUpdate, RoomCreate


def valid_signup(**overrides):
    data = {
        "full_name": "Ana Torres",
        "email": "ana@example.com",
        "dni": "12345678",
        "phone": "987654321",
        "address": "Av. Larco 123",
        "password": "secret123",
    }
    data.update(overrides)
    return data


class TestProfileSchemas:
    """Sign-up and profile update rules."""

    def test_valid_signup(self):
        """Test a valid sign-up payload."""
        profile = ProfileCreate(**valid_signup())
        assert profile.email == "ana@example.com"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"full_name": "Al"},
            {"email": "not-an-email"},
            {"dni": "1234567"},
            {"dni": "1234567a"},
            {"phone": "98765432"},
            {"address": "Lima"},
            {"password": "12345"},
        ],
    )
    def test_invalid_signup(self, overrides):
        """Test each sign-up field rule."""
        with pytest.raises(ValidationError):
            ProfileCreate(**valid_signup(**overrides))

    def test_update_fields_are_optional(self):
        """Test partial profile updates."""
        assert ProfileUpdate().model_dump(exclude_unset=True) == {}
        with pytest.raises(ValidationError):
            ProfileUpdate(phone="123")

    def test_profile_read_flattens_roles(self):
        """Test that role rows become a sorted list of roles."""
        profile = ProfileRead(
            id=1,
            full_name="Ana Torres",
            email="ana@example.com",
            roles=[UserRole(role=RoleEnum.RECEPTIONIST), UserRole(role=RoleEnum.CLIENT)],
            created_at=datetime(2025, 1, 1),
        )
        assert profile.roles == [RoleEnum.CLIENT, RoleEnum.RECEPTIONIST]


class TestRoomSchemas:
    """Room payload rules."""

    def test_room_defaults(self):
        """Test room payload defaults."""
        room = RoomCreate(name="Garden Double", type=RoomType.DOUBLE, price_per_night="280.00")
        assert room.capacity == 2
        assert room.price_per_night == Decimal("280.00")
        assert room.amenities == []

    def test_negative_price_rejected(self):
        """Test that a negative nightly rate is rejected."""
        with pytest.raises(ValidationError):
            RoomCreate(name="Broken", type=RoomType.SINGLE, price_per_night="-1")

    def test_unknown_room_type_rejected(self):
        """Test that an unknown room type is rejected."""
        with pytest.raises(ValidationError):
            RoomCreate(name="Broken", type="penthouse", price_per_night="100")


class TestBookingSchemas:
    """Booking payloads leave business rules to the submission flow."""

    def test_dates_and_guests_may_be_missing(self):
        """Test that the booking payload defers date and guest checks."""
        booking = BookingCreate(room_id=1, guests=0)
        assert booking.check_in is None
        assert booking.check_out is None
        assert booking.guests == 0
        assert booking.service_ids == []

    def test_dates_are_parsed(self):
        """Test parsing booking dates."""
        booking = BookingCreate(room_id=1, check_in="2025-01-01", check_out="2025-01-03")
        assert (booking.check_out - booking.check_in).days == 2
