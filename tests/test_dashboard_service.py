"""
Tests for the dashboard workflow: load, demo fallback, validation,
refetch after writes and failure reporting.
"""
import threading
from datetime import date
from typing import List, Optional

import pytest

from pousada.adapters.base import PousadaBackend
from pousada.adapters.wire import decode_reservation
from pousada.exceptions import BackendError, BackendUnavailableError, BookingValidationError
from pousada.models import (
    BookingRequest,
    Guest,
    KeyStatus,
    PaymentMethod,
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Room,
    RoomStatus,
    RoomType,
)
from pousada.services import DashboardService, NotificationLevel, NotificationService, NotificationSink
from pousada.services.lifecycle import ReservationAction


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

class FakeBackend:
    """In-memory backend; ``fail_with`` makes every call raise."""

    def __init__(self):
        self.guests: List[Guest] = [
            Guest(id=1, full_name="João Silva", tax_id="123.456.789-00", phone="11987654321"),
            Guest(id=2, full_name="Maria Santos", tax_id="98765432100", phone="21998765432"),
        ]
        self.rooms: List[Room] = [
            Room(id=1, number=101, room_type=RoomType.SINGLE, nightly_rate=150.0),
            Room(id=2, number=102, room_type=RoomType.DOUBLE, nightly_rate=200.0, status=RoomStatus.OCCUPIED),
        ]
        self.reservations: List[Reservation] = [
            Reservation(
                id=1,
                guest_name="Maria Santos",
                room_number=102,
                check_in=date(2024, 1, 15),
                check_out=date(2024, 1, 20),
                total_amount=1000.0,
                payment_status=PaymentStatus.PAID,
                guest_tax_id="987.654.321-00",
            ),
        ]
        self.calls: List[str] = []
        self.fail_with: Optional[Exception] = None
        self.server_total: Optional[float] = None
        self.revenue_value = 0.0
        self.closed = False

    def _call(self, name):
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def _reservation(self, reservation_id):
        return next(r for r in self.reservations if r.id == reservation_id)

    def list_guests(self):
        self._call("list_guests")
        return list(self.guests)

    def create_guest(self, guest):
        self._call("create_guest")
        created = Guest(id=len(self.guests) + 1, full_name=guest.full_name, tax_id=guest.tax_id, phone=guest.phone)
        self.guests.append(created)
        return created

    def update_guest(self, guest_id, guest):
        self._call("update_guest")
        return guest

    def delete_guest(self, guest_id):
        self._call("delete_guest")
        self.guests = [g for g in self.guests if g.id != guest_id]

    def list_rooms(self):
        self._call("list_rooms")
        return list(self.rooms)

    def create_room(self, room):
        self._call("create_room")
        self.rooms.append(room)
        return room

    def update_room_status(self, room_number, status):
        self._call("update_room_status")
        self.rooms = [r.with_status(status) if r.number == room_number else r for r in self.rooms]
        return next(r for r in self.rooms if r.number == room_number)

    def list_reservations(self):
        self._call("list_reservations")
        return list(self.reservations)

    def create_reservation(self, request: BookingRequest):
        self._call("create_reservation")
        reservation = Reservation(
            id=len(self.reservations) + 1,
            guest_name="João Silva",
            room_number=request.room_number,
            check_in=request.check_in,
            check_out=request.check_out,
            total_amount=self.server_total if self.server_total is not None else request.preview_amount,
        )
        self.reservations.append(reservation)
        return reservation

    def check_in(self, reservation_id):
        self._call("check_in")
        return self._reservation(reservation_id)

    def check_out(self, reservation_id):
        self._call("check_out")
        reservation = self._reservation(reservation_id)
        reservation.reservation_status = ReservationStatus.COMPLETED
        return reservation

    def return_key(self, reservation_id):
        self._call("return_key")
        reservation = self._reservation(reservation_id)
        reservation.key_status = KeyStatus.RETURNED
        return reservation

    def process_payment(self, reservation_id, method=None):
        self._call(f"process_payment:{method.value if method else None}")
        reservation = self._reservation(reservation_id)
        reservation.payment_status = PaymentStatus.PAID
        return reservation

    def cancel_reservation(self, reservation_id):
        self._call("cancel_reservation")
        reservation = self._reservation(reservation_id)
        reservation.reservation_status = ReservationStatus.CANCELLED
        return reservation

    def revenue(self, start, end):
        self._call("revenue")
        return self.revenue_value

    def close(self):
        self.closed = True


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def dashboard(backend):
    service = DashboardService(backend, NotificationService())
    service.refresh()
    backend.calls.clear()
    service.notifications.drain()
    return service


def titles(service: DashboardService):
    return [n.title for n in service.notifications.drain()]


# ============================================================================
# Loading
# ============================================================================

class TestRefresh:

    def test_fake_is_a_backend(self, backend):
        assert isinstance(backend, PousadaBackend)

    def test_loads_snapshot(self, dashboard):
        assert not dashboard.demo_mode
        assert len(dashboard.snapshot.guests) == 2
        assert len(dashboard.snapshot.rooms) == 2
        assert len(dashboard.snapshot.reservations) == 1

    def test_unreachable_backend_switches_to_demo(self, backend):
        backend.fail_with = BackendUnavailableError("Failed to fetch: refused")
        service = DashboardService(backend, NotificationService())

        snapshot = service.refresh()

        assert snapshot.demo_mode
        assert service.demo_mode
        assert [g.full_name for g in snapshot.guests] == ["João Silva", "Maria Santos"]
        assert [r.number for r in snapshot.rooms] == [101, 102, 201, 202]
        assert snapshot.reservations[0].total_amount == 1750.0
        assert titles(service) == ["Modo Demonstração"]

    def test_reconnect_leaves_demo_mode(self, backend):
        backend.fail_with = BackendError("boom", status_code=500)
        service = DashboardService(backend, NotificationService())
        service.refresh()
        assert service.demo_mode

        backend.fail_with = None
        service.refresh()
        assert not service.demo_mode
        assert len(service.snapshot.rooms) == 2

    def test_reports_to_any_sink(self, backend):
        class RecordingSink:
            def __init__(self):
                self.received = []

            def notify(self, notification):
                self.received.append(notification)

        sink = RecordingSink()
        assert isinstance(sink, NotificationSink)
        backend.fail_with = BackendUnavailableError("Failed to fetch: refused")

        DashboardService(backend, sink).refresh()

        assert [(n.level, n.title) for n in sink.received] == [(NotificationLevel.WARNING, "Modo Demonstração")]


# ============================================================================
# Derived views
# ============================================================================

class TestDerivedViews:

    def test_stats(self, dashboard):
        stats = dashboard.stats()
        assert stats.total_rooms == 2
        assert stats.available_rooms == 1
        assert stats.active_reservations == 1
        assert stats.guests_with_active_reservation == 1
        assert stats.occupancy_rate == 50.0

    def test_stats_without_rooms(self):
        service = DashboardService(FakeBackend(), NotificationService())
        assert service.stats().occupancy_rate == 0.0

    def test_guest_matching_by_cpf(self, dashboard):
        maria = dashboard.find_guest(2)
        assert [r.id for r in dashboard.reservations_for_guest(maria)] == [1]

    def test_guest_matching_falls_back_to_name(self, dashboard):
        dashboard.snapshot.reservations[0].guest_tax_id = None
        maria = dashboard.find_guest(2)
        assert len(dashboard.reservations_for_guest(maria)) == 1

    def test_guests_by_activity(self, dashboard):
        dashboard.snapshot.reservations[0].reservation_status = ReservationStatus.COMPLETED
        active, inactive = dashboard.guests_by_activity()
        assert [g.full_name for g in active] == ["João Silva"]
        assert [g.full_name for g in inactive] == ["Maria Santos"]

    def test_matching_reservation_decoded_with_numeric_cpf(self, backend):
        backend.reservations = [decode_reservation({
            "id": 9,
            "nomeHospede": "Maria Santos",
            "numeroQuarto": 102,
            "dataCheckIn": "2024-01-15",
            "dataCheckOut": "2024-01-20",
            "valorTotal": 1000.0,
            "cpfHospede": 98765432100,
        })]
        service = DashboardService(backend, NotificationService())
        service.refresh()

        active, inactive = service.guests_by_activity()

        assert [r.id for r in service.reservations_for_guest(service.find_guest(2))] == [9]
        assert [g.full_name for g in active] == ["João Silva", "Maria Santos"]
        assert inactive == []

    def test_reservations_by_status(self, dashboard):
        grouped = dashboard.reservations_by_status()
        assert len(grouped[ReservationStatus.ACTIVE]) == 1
        assert grouped[ReservationStatus.CANCELLED] == []
        assert grouped[ReservationStatus.COMPLETED] == []

    def test_deletion_warning(self, dashboard):
        assert "ATIVA" in dashboard.guest_deletion_warning(dashboard.find_guest(2))
        assert dashboard.guest_deletion_warning(dashboard.find_guest(1)) is None

        dashboard.snapshot.reservations[0].reservation_status = ReservationStatus.CANCELLED
        assert "histórico" in dashboard.guest_deletion_warning(dashboard.find_guest(2))


# ============================================================================
# Writes
# ============================================================================

class TestGuests:

    def test_create_guest_refetches(self, dashboard, backend):
        created = dashboard.create_guest("Ana Lima", "11122233344", "11911112222")

        assert created.id == 3
        assert backend.calls == ["create_guest", "list_guests", "list_rooms", "list_reservations"]
        assert len(dashboard.snapshot.guests) == 3
        assert titles(dashboard) == ["Hóspede cadastrado"]

    def test_create_guest_validation(self, dashboard, backend):
        assert dashboard.create_guest("  ", "111", "") is None
        assert dashboard.create_guest("Ana", "", "") is None
        assert backend.calls == []
        assert titles(dashboard) == ["Dados inválidos", "Dados inválidos"]

    def test_delete_guest_with_active_reservation_proceeds(self, dashboard, backend):
        assert dashboard.delete_guest(2) is True
        assert "delete_guest" in backend.calls
        assert titles(dashboard) == ["Hóspede com reservas", "Hóspede deletado"]
        # the reservation survives, orphaned
        assert len(dashboard.snapshot.reservations) == 1

    def test_failure_is_classified_and_snapshot_kept(self, dashboard, backend):
        backend.fail_with = BackendError("CpfJaCadastradoException", status_code=409)
        before = dashboard.snapshot

        assert dashboard.create_guest("Ana", "123", "") is None

        notifications = dashboard.notifications.drain()
        assert notifications[0].level == NotificationLevel.ERROR
        assert notifications[0].title == "CPF já cadastrado"
        assert dashboard.snapshot is before


class TestRooms:

    def test_create_room(self, dashboard, backend):
        room = dashboard.create_room("301", "double", "220,50")
        assert room.number == 301
        assert room.nightly_rate == 220.5
        assert room.room_type == RoomType.DOUBLE
        assert backend.calls[0] == "create_room"

    def test_create_lossy_room_type_informs(self, dashboard):
        dashboard.create_room(301, RoomType.DELUXE, 400.0)
        assert titles(dashboard) == ["Tipo de quarto", "Quarto cadastrado"]

    def test_create_room_validation(self, dashboard, backend):
        assert dashboard.create_room("abc", "SINGLE", 100) is None
        assert dashboard.create_room(301, "PENTHOUSE", 100) is None
        assert dashboard.create_room(301, "SINGLE", -1) is None
        assert backend.calls == []

    def test_update_room_status(self, dashboard, backend):
        room = dashboard.update_room_status(101, RoomStatus.MAINTENANCE)
        assert room.status == RoomStatus.MAINTENANCE
        assert dashboard.find_room(101).status == RoomStatus.MAINTENANCE

    def test_update_room_status_unchanged(self, dashboard, backend):
        dashboard.update_room_status(101, RoomStatus.AVAILABLE)
        assert backend.calls == []
        assert titles(dashboard) == ["Nenhuma alteração"]


class TestReservations:

    def test_create_reservation(self, dashboard, backend):
        reservation = dashboard.create_reservation(1, 101, date(2024, 1, 15), date(2024, 1, 18))
        assert reservation.total_amount == 450.0
        assert backend.calls[0] == "create_reservation"
        assert len(dashboard.snapshot.reservations) == 2

    def test_server_total_is_authoritative(self, dashboard, backend):
        backend.server_total = 420.0
        reservation = dashboard.create_reservation(1, 101, "2024-01-15", "2024-01-18")
        assert reservation.total_amount == 420.0
        assert dashboard.find_reservation(reservation.id).total_amount == 420.0

    @pytest.mark.parametrize("args", [
        (None, 101, "2024-01-15", "2024-01-18"),
        (1, None, "2024-01-15", "2024-01-18"),
        (1, 101, "2024-01-18", "2024-01-18"),
        (1, 101, "2024-01-18", "2024-01-15"),
        (1, 101, None, "2024-01-15"),
    ])
    def test_invalid_booking_never_reaches_backend(self, dashboard, backend, args):
        assert dashboard.create_reservation(*args) is None
        assert backend.calls == []
        assert titles(dashboard) == ["Dados inválidos"]

    def test_quote_unknown_room(self, dashboard):
        with pytest.raises(BookingValidationError, match="999"):
            dashboard.quote_reservation(1, 999, "2024-01-15", "2024-01-18")

    def test_quote_uses_default_payment_method(self, backend):
        service = DashboardService(backend, NotificationService(), default_payment_method=PaymentMethod.PIX)
        service.refresh()
        request = service.quote_reservation(1, 101, "2024-01-15", "2024-01-18")
        assert request.payment_method == PaymentMethod.PIX
        assert request.preview_amount == 450.0

    def test_room_occupied_failure(self, dashboard, backend):
        backend.fail_with = BackendError('{"message": "QuartoOcupadoException"}', status_code=409)
        assert dashboard.create_reservation(1, 101, "2024-01-15", "2024-01-18") is None
        assert titles(dashboard) == ["Quarto ocupado"]

    def test_lifecycle_walkthrough(self, dashboard, backend):
        dashboard.perform(1, ReservationAction.RETURN_KEY)
        assert dashboard.find_reservation(1).key_status == KeyStatus.RETURNED

        dashboard.perform(1, ReservationAction.CHECK_OUT)
        assert dashboard.find_reservation(1).reservation_status == ReservationStatus.COMPLETED
        assert "check_out" in backend.calls

    def test_unavailable_action_refused_locally(self, dashboard, backend):
        # key not returned yet: check-out is not offered
        assert dashboard.perform(1, ReservationAction.CHECK_OUT) is None
        assert backend.calls == []
        assert titles(dashboard) == ["Ação indisponível"]

    def test_check_in_is_left_to_backend(self, dashboard, backend):
        backend.fail_with = BackendError("CheckInInvalidoException", status_code=400)
        assert dashboard.perform(1, ReservationAction.CHECK_IN) is None
        assert backend.calls == ["check_in"]
        assert titles(dashboard) == ["Check-in inválido"]

    def test_process_payment_uses_default_method(self, backend):
        backend.reservations[0].payment_status = PaymentStatus.PENDING
        service = DashboardService(backend, NotificationService(), default_payment_method=PaymentMethod.PIX)
        service.refresh()
        service.perform(1, ReservationAction.PROCESS_PAYMENT)
        assert "process_payment:PIX" in backend.calls

    def test_in_flight_guard(self, dashboard, backend):
        seen = []

        def reentrant_check_in(reservation_id):
            seen.append(dashboard.is_in_flight(f"reservation:{reservation_id}"))
            # a second tap while the first call is still running
            assert dashboard.cancel_reservation(reservation_id) is None
            return backend._reservation(reservation_id)

        backend.check_in = reentrant_check_in
        dashboard.check_in(1)

        assert seen == [True]
        assert "cancel_reservation" not in backend.calls
        assert titles(dashboard)[0] == "Operação em andamento"
        assert not dashboard.is_in_flight("reservation:1")

    def test_in_flight_guard_across_threads(self, dashboard, backend):
        started = threading.Event()
        release = threading.Event()

        def slow_check_in(reservation_id):
            started.set()
            release.wait(timeout=5)
            return backend._reservation(reservation_id)

        backend.check_in = slow_check_in
        worker = threading.Thread(target=dashboard.check_in, args=(1,))
        worker.start()
        try:
            assert started.wait(timeout=5)
            assert dashboard.cancel_reservation(1) is None
        finally:
            release.set()
            worker.join(timeout=5)

        assert "cancel_reservation" not in backend.calls
        assert "Operação em andamento" in titles(dashboard)


# ============================================================================
# Reports
# ============================================================================

class TestRevenue:

    def test_revenue(self, dashboard, backend):
        backend.revenue_value = 2200.0
        assert dashboard.revenue_report("01/01/2024", "31/01/2024") == 2200.0

    def test_missing_date(self, dashboard, backend):
        assert dashboard.revenue_report("", "2024-01-31") is None
        assert backend.calls == []
        notification = dashboard.notifications.drain()[0]
        assert notification.description == "Por favor, preencha as duas datas."

    def test_end_before_start(self, dashboard, backend):
        assert dashboard.revenue_report("2024-02-01", "2024-01-01") is None
        assert backend.calls == []
        notification = dashboard.notifications.drain()[0]
        assert notification.description == "Data final deve ser posterior à data inicial."

    def test_failure(self, dashboard, backend):
        backend.fail_with = BackendUnavailableError("Failed to fetch: timeout")
        assert dashboard.revenue_report("2024-01-01", "2024-01-31") is None
        assert titles(dashboard) == ["Erro de conexão"]
