from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date

from pousada.models.reservation import PaymentMethod


@dataclass
class BookingRequest:
    """A validated, priced booking ready to be sent to the backend.

    ``preview_amount`` is advisory; the reservation echoed by the backend
    carries the authoritative total.
    """

    guest_id: int
    room_number: int
    check_in: date
    check_out: date
    nights: int
    preview_amount: float
    payment_method: PaymentMethod = field(default=PaymentMethod.DINHEIRO)
