"""Fixed dataset shown when the backend cannot be reached (demo mode)."""
from __future__ import annotations

from datetime import date
from typing import List

from pousada.models import (
    Guest,
    KeyStatus,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Room,
    RoomStatus,
    RoomType,
)


def demo_guests() -> List[Guest]:
    return [
        Guest(id=1, tax_id="123.456.789-00", full_name="João Silva", phone="(11) 98765-4321"),
        Guest(id=2, tax_id="987.654.321-00", full_name="Maria Santos", phone="(21) 99876-5432"),
    ]


def demo_rooms() -> List[Room]:
    return [
        Room(id=1, number=101, room_type=RoomType.SINGLE, nightly_rate=150.0, status=RoomStatus.AVAILABLE),
        Room(id=2, number=102, room_type=RoomType.DELUXE, nightly_rate=350.0, status=RoomStatus.OCCUPIED),
        Room(id=3, number=201, room_type=RoomType.SINGLE, nightly_rate=150.0, status=RoomStatus.AVAILABLE),
        Room(id=4, number=202, room_type=RoomType.SUITE, nightly_rate=500.0, status=RoomStatus.MAINTENANCE),
    ]


def demo_reservations() -> List[Reservation]:
    return [
        Reservation(
            id=1,
            guest_name="Maria Santos",
            room_number=102,
            check_in=date(2024, 1, 15),
            check_out=date(2024, 1, 20),
            total_amount=1750.0,
            reservation_status=ReservationStatus.ACTIVE,
            payment_status=PaymentStatus.PAID,
            key_status=KeyStatus.NOT_RETURNED,
        ),
    ]
