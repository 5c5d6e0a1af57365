"""
Tests for the reservation lifecycle (which actions the panel offers).
"""
from datetime import date

import pytest

from pousada.models import KeyStatus, PaymentStatus, Reservation, ReservationStatus
from pousada.services.lifecycle import (
    ReservationAction,
    available_actions,
    can_perform,
    checkout_blockers,
    is_terminal,
)


def make_reservation(status=ReservationStatus.ACTIVE, payment=PaymentStatus.PENDING, key=KeyStatus.NOT_RETURNED):
    return Reservation(
        id=1,
        guest_name="Maria Santos",
        room_number=102,
        check_in=date(2024, 1, 15),
        check_out=date(2024, 1, 20),
        total_amount=1750.0,
        reservation_status=status,
        payment_status=payment,
        key_status=key,
    )


class TestAvailableActions:

    def test_new_reservation(self):
        actions = available_actions(make_reservation())
        assert actions == [
            ReservationAction.PROCESS_PAYMENT,
            ReservationAction.RETURN_KEY,
            ReservationAction.CANCEL,
        ]

    def test_paid_key_out(self):
        actions = available_actions(make_reservation(payment=PaymentStatus.PAID))
        assert actions == [ReservationAction.RETURN_KEY, ReservationAction.CANCEL]

    def test_pending_key_returned(self):
        actions = available_actions(make_reservation(key=KeyStatus.RETURNED))
        assert actions == [ReservationAction.PROCESS_PAYMENT, ReservationAction.CANCEL]

    def test_paid_and_returned_allows_checkout(self):
        actions = available_actions(make_reservation(payment=PaymentStatus.PAID, key=KeyStatus.RETURNED))
        assert actions == [ReservationAction.CHECK_OUT, ReservationAction.CANCEL]

    @pytest.mark.parametrize("status", [ReservationStatus.CANCELLED, ReservationStatus.COMPLETED])
    def test_terminal_reservations_offer_nothing(self, status):
        reservation = make_reservation(status=status, payment=PaymentStatus.PAID, key=KeyStatus.RETURNED)
        assert available_actions(reservation) == []
        assert is_terminal(reservation)

    @pytest.mark.parametrize("payment", list(PaymentStatus))
    @pytest.mark.parametrize("key", list(KeyStatus))
    def test_checkout_only_when_paid_and_returned(self, payment, key):
        reservation = make_reservation(payment=payment, key=key)
        expected = payment == PaymentStatus.PAID and key == KeyStatus.RETURNED
        assert can_perform(reservation, ReservationAction.CHECK_OUT) is expected

    @pytest.mark.parametrize("payment", list(PaymentStatus))
    @pytest.mark.parametrize("key", list(KeyStatus))
    def test_active_can_always_cancel_and_never_check_in(self, payment, key):
        reservation = make_reservation(payment=payment, key=key)
        assert can_perform(reservation, ReservationAction.CANCEL)
        assert not can_perform(reservation, ReservationAction.CHECK_IN)
        assert not is_terminal(reservation)


class TestCheckoutBlockers:

    def test_reasons(self):
        assert checkout_blockers(make_reservation()) == ["Pagamento pendente", "Chave não devolvida"]
        assert checkout_blockers(make_reservation(payment=PaymentStatus.PAID)) == ["Chave não devolvida"]
        assert checkout_blockers(
            make_reservation(payment=PaymentStatus.PAID, key=KeyStatus.RETURNED)
        ) == []

    def test_inactive(self):
        assert checkout_blockers(make_reservation(status=ReservationStatus.CANCELLED)) == [
            "Reserva não está ativa"
        ]
