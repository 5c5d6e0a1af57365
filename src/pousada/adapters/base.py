from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable, Optional, List

from pousada.models import BookingRequest, Guest, PaymentMethod, Reservation, Room, RoomStatus


@runtime_checkable
class PousadaBackend(Protocol):
    # guests
    def list_guests(self) -> List[Guest]: ...
    def create_guest(self, guest: Guest) -> Guest: ...
    def update_guest(self, guest_id: int, guest: Guest) -> Guest: ...
    def delete_guest(self, guest_id: int) -> None: ...

    # rooms
    def list_rooms(self) -> List[Room]: ...
    def create_room(self, room: Room) -> Room: ...
    def update_room_status(self, room_number: int, status: RoomStatus) -> Room: ...

    # reservations
    def list_reservations(self) -> List[Reservation]: ...
    def create_reservation(self, request: BookingRequest) -> Reservation: ...
    def check_in(self, reservation_id: int) -> Reservation: ...
    def check_out(self, reservation_id: int) -> Reservation: ...
    def return_key(self, reservation_id: int) -> Reservation: ...
    def process_payment(self, reservation_id: int, method: Optional[PaymentMethod] = None) -> Reservation: ...
    def cancel_reservation(self, reservation_id: int) -> Reservation: ...

    # reports
    def revenue(self, start: date, end: date) -> float: ...

    # lifecycle
    def close(self) -> None: ...