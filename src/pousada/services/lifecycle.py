"""
Reservation lifecycle: which transitions the panel offers for a snapshot.

The backend is authoritative for every transition; this module only decides
which buttons to show. It looks at nothing but the three status fields of
the reservation it is given.

    ACTIVE --PROCESS_PAYMENT--> payment PENDING -> PAID
    ACTIVE --RETURN_KEY-------> key NOT_RETURNED -> RETURNED
    ACTIVE --CHECK_OUT--------> COMPLETED   (needs PAID and RETURNED)
    ACTIVE --CANCEL-----------> CANCELLED   (any payment / key state)

CANCELLED and COMPLETED are terminal.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List

from pousada.models import KeyStatus, PaymentStatus, Reservation, ReservationStatus


class ReservationAction(str, Enum):
    CHECK_IN = "CHECK_IN"
    PROCESS_PAYMENT = "PROCESS_PAYMENT"
    RETURN_KEY = "RETURN_KEY"
    CHECK_OUT = "CHECK_OUT"
    CANCEL = "CANCEL"


ACTION_LABELS: Dict[ReservationAction, str] = {
    ReservationAction.CHECK_IN: "Fazer Check-in",
    ReservationAction.PROCESS_PAYMENT: "Processar Pagamento",
    ReservationAction.RETURN_KEY: "Devolver Chave",
    ReservationAction.CHECK_OUT: "Fazer Check-out",
    ReservationAction.CANCEL: "Cancelar",
}

TERMINAL_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.COMPLETED})


def is_terminal(reservation: Reservation) -> bool:
    return reservation.reservation_status in TERMINAL_STATUSES


def available_actions(reservation: Reservation) -> List[ReservationAction]:
    """Actions to offer for this reservation, in display order.

    CHECK_IN is never derived here: none of the modelled states is a
    pre-check-in state, so check-in is only issued on explicit request and
    the backend decides.
    """
    if reservation.reservation_status != ReservationStatus.ACTIVE:
        return []

    actions: List[ReservationAction] = []
    if reservation.payment_status == PaymentStatus.PENDING:
        actions.append(ReservationAction.PROCESS_PAYMENT)
    if reservation.key_status == KeyStatus.NOT_RETURNED:
        actions.append(ReservationAction.RETURN_KEY)
    if reservation.payment_status == PaymentStatus.PAID and reservation.key_status == KeyStatus.RETURNED:
        actions.append(ReservationAction.CHECK_OUT)
    actions.append(ReservationAction.CANCEL)
    return actions


def can_perform(reservation: Reservation, action: ReservationAction) -> bool:
    return ReservationAction(action) in available_actions(reservation)


def checkout_blockers(reservation: Reservation) -> List[str]:
    """Human readable reasons why check-out is not offered (empty when it is)."""
    if reservation.reservation_status != ReservationStatus.ACTIVE:
        return ["Reserva não está ativa"]
    reasons = []
    if reservation.payment_status != PaymentStatus.PAID:
        reasons.append("Pagamento pendente")
    if reservation.key_status != KeyStatus.RETURNED:
        reasons.append("Chave não devolvida")
    return reasons
