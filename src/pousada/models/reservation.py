from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from pousada.models.room import RoomType


class ReservationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"


class KeyStatus(str, Enum):
    NOT_RETURNED = "NOT_RETURNED"
    RETURNED = "RETURNED"


class PaymentMethod(str, Enum):
    DINHEIRO = "DINHEIRO"
    PIX = "PIX"
    CARTAO_CREDITO = "CARTAO_CREDITO"
    CARTAO_DEBITO = "CARTAO_DEBITO"
    TRANSFERENCIA_BANCARIA = "TRANSFERENCIA_BANCARIA"
    BOLETO = "BOLETO"
    CHEQUE = "CHEQUE"


RESERVATION_STATUS_LABELS = {
    ReservationStatus.ACTIVE: "Ativa",
    ReservationStatus.CANCELLED: "Cancelada",
    ReservationStatus.COMPLETED: "Finalizada",
}

PAYMENT_STATUS_LABELS = {
    PaymentStatus.PENDING: "Pendente",
    PaymentStatus.PAID: "Pago",
}

KEY_STATUS_LABELS = {
    KeyStatus.NOT_RETURNED: "Não devolvida",
    KeyStatus.RETURNED: "Devolvida",
}


@dataclass
class Reservation:
    """A room booked for one guest over a date range.

    Guest and room are denormalized (name / number as the backend sends
    them). ``guest_tax_id`` is kept when the backend echoes it so guests can
    be matched by CPF instead of by display name.
    """

    guest_name: str
    room_number: int
    check_in: date
    check_out: date
    total_amount: float

    id: Optional[int] = field(default=None)
    reservation_status: ReservationStatus = field(default=ReservationStatus.ACTIVE)
    payment_status: PaymentStatus = field(default=PaymentStatus.PENDING)
    key_status: KeyStatus = field(default=KeyStatus.NOT_RETURNED)

    guest_tax_id: Optional[str] = field(default=None)
    guest_phone: Optional[str] = field(default=None)
    room_type: Optional[RoomType] = field(default=None)
    payment_method: Optional[PaymentMethod] = field(default=None)

    @property
    def nights(self) -> int:
        return max(0, (self.check_out - self.check_in).days)

    def is_active(self) -> bool:
        return self.reservation_status == ReservationStatus.ACTIVE

    def get_reference_code(self) -> str:
        """'RSV-000123' formatted reference code."""
        if self.id is not None:
            return f"RSV-{self.id:06d}"
        return "RSV-??????"
