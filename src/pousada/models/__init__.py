from .guest import Guest
from .room import Room, RoomType, RoomStatus, ROOM_TYPE_LABELS, ROOM_STATUS_LABELS
from .booking import BookingRequest
from .reservation import (
    Reservation,
    ReservationStatus,
    PaymentStatus,
    KeyStatus,
    PaymentMethod,
    RESERVATION_STATUS_LABELS,
    PAYMENT_STATUS_LABELS,
    KEY_STATUS_LABELS,
)

__all__ = [
    "BookingRequest",
    "Guest",
    "Room",
    "RoomType",
    "RoomStatus",
    "ROOM_TYPE_LABELS",
    "ROOM_STATUS_LABELS",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",
    "KeyStatus",
    "PaymentMethod",
    "RESERVATION_STATUS_LABELS",
    "PAYMENT_STATUS_LABELS",
    "KEY_STATUS_LABELS",
]
