from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, TypeVar

from pousada.adapters.base import PousadaBackend
from pousada.adapters.wire import LOSSY_ROOM_TYPES, ROOM_TYPE_TO_WIRE, normalize_token
from pousada.demo import demo_guests, demo_reservations, demo_rooms
from pousada.exceptions import BookingValidationError, PousadaError, ValidationError
from pousada.formatting import parse_date
from pousada.models import (
    BookingRequest,
    Guest,
    PaymentMethod,
    Reservation,
    ReservationStatus,
    Room,
    RoomStatus,
    RoomType,
)
from pousada.services.booking_service import quote_booking
from pousada.services.error_classifier import VALIDATION_TITLE, classify_exception
from pousada.services.lifecycle import ACTION_LABELS, ReservationAction, can_perform
from pousada.services.notification_service import Notification, NotificationLevel, NotificationSink

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DashboardSnapshot:
    """Last state confirmed by the backend (or the demo dataset)."""

    guests: List[Guest] = field(default_factory=list)
    rooms: List[Room] = field(default_factory=list)
    reservations: List[Reservation] = field(default_factory=list)
    demo_mode: bool = field(default=False)


@dataclass(frozen=True)
class DashboardStats:
    guests_with_active_reservation: int
    total_rooms: int
    available_rooms: int
    active_reservations: int
    occupancy_rate: float  # percent


def _digits(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


class DashboardService:
    """
    Panel workflow: operator action -> validation -> backend -> full reload.

    There is no optimistic local mutation: after every successful write the
    whole snapshot (guests, rooms, reservations) is fetched again, so what is
    displayed is always the last state the backend confirmed. Failures are
    classified and reported through the notification service and leave the
    snapshot untouched.
    """

    def __init__(
        self,
        backend: PousadaBackend,
        notifications: NotificationSink,
        default_payment_method: PaymentMethod = PaymentMethod.DINHEIRO,
    ):
        self.backend = backend
        self.notifications = notifications
        self.default_payment_method = default_payment_method
        self.snapshot = DashboardSnapshot()
        self._in_flight: Set[str] = set()
        self._in_flight_lock = threading.Lock()

    @property
    def demo_mode(self) -> bool:
        return self.snapshot.demo_mode

    # ------------------------------------
    # Loading
    # ------------------------------------
    def refresh(self) -> DashboardSnapshot:
        """Fetches everything; falls back to the demo dataset when the backend fails."""
        try:
            guests = self.backend.list_guests()
            rooms = self.backend.list_rooms()
            reservations = self.backend.list_reservations()
        except PousadaError as e:
            logger.warning(f"Backend unavailable, switching to demo mode: {e}")
            self.snapshot = DashboardSnapshot(
                guests=demo_guests(),
                rooms=demo_rooms(),
                reservations=demo_reservations(),
                demo_mode=True,
            )
            self._notify(
                NotificationLevel.WARNING,
                "Modo Demonstração",
                "O backend não está conectado. Os dados exibidos são apenas exemplos.",
            )
            return self.snapshot

        self.snapshot = DashboardSnapshot(guests=guests, rooms=rooms, reservations=reservations)
        logger.info(
            f"Snapshot loaded: {len(guests)} guests, {len(rooms)} rooms, {len(reservations)} reservations"
        )
        return self.snapshot

    # ------------------------------------
    # Lookups
    # ------------------------------------
    def find_guest(self, guest_id: int) -> Optional[Guest]:
        return next((g for g in self.snapshot.guests if g.id == guest_id), None)

    def find_room(self, room_number: int) -> Optional[Room]:
        return next((r for r in self.snapshot.rooms if r.number == room_number), None)

    def find_reservation(self, reservation_id: int) -> Optional[Reservation]:
        return next((r for r in self.snapshot.reservations if r.id == reservation_id), None)

    def reservations_for_guest(self, guest: Guest) -> List[Reservation]:
        """Matches by CPF when the reservation carries one, by display name otherwise."""
        guest_cpf = _digits(guest.tax_id)
        matches = []
        for reservation in self.snapshot.reservations:
            reservation_cpf = _digits(reservation.guest_tax_id)
            if reservation_cpf and guest_cpf:
                if reservation_cpf == guest_cpf:
                    matches.append(reservation)
            elif reservation.guest_name == guest.full_name:
                matches.append(reservation)
        return matches

    # ------------------------------------
    # Derived views
    # ------------------------------------
    def stats(self) -> DashboardStats:
        rooms = self.snapshot.rooms
        active = sum(1 for r in self.snapshot.reservations if r.is_active())
        available = sum(1 for r in rooms if r.status == RoomStatus.AVAILABLE)
        occupancy = (active / len(rooms)) * 100 if rooms else 0.0
        return DashboardStats(
            guests_with_active_reservation=active,
            total_rooms=len(rooms),
            available_rooms=available,
            active_reservations=active,
            occupancy_rate=occupancy,
        )

    def reservations_by_status(self) -> Dict[ReservationStatus, List[Reservation]]:
        grouped: Dict[ReservationStatus, List[Reservation]] = {status: [] for status in ReservationStatus}
        for reservation in self.snapshot.reservations:
            grouped[reservation.reservation_status].append(reservation)
        return grouped

    def guests_by_activity(self) -> Tuple[List[Guest], List[Guest]]:
        """(active, inactive). A guest with no reservation at all counts as active."""
        active: List[Guest] = []
        inactive: List[Guest] = []
        for guest in self.snapshot.guests:
            history = self.reservations_for_guest(guest)
            if not history or any(r.is_active() for r in history):
                active.append(guest)
            else:
                inactive.append(guest)
        return active, inactive

    def guest_deletion_warning(self, guest: Guest) -> Optional[str]:
        history = self.reservations_for_guest(guest)
        active_count = sum(1 for r in history if r.is_active())
        if active_count:
            return (
                f"ATENÇÃO: Este hóspede possui {active_count} reserva(s) ATIVA(S)! "
                f"Ao deletar, as reservas ficarão sem hóspede vinculado!"
            )
        if history:
            return (
                f"Este hóspede possui {len(history)} reserva(s) no histórico. "
                f"Ao deletar, essas informações de histórico podem ser afetadas."
            )
        return None

    # ------------------------------------
    # Execution
    # ------------------------------------
    def _notify(self, level: NotificationLevel, title: str, description: Optional[str] = None) -> None:
        self.notifications.notify(Notification(level, title, description))

    def _report_failure(self, exc: PousadaError) -> None:
        info = classify_exception(exc)
        self._notify(NotificationLevel.ERROR, info.title, info.description)

    def _run(
        self,
        key: str,
        operation: Callable[[], T],
        success_title: str,
        success_description: Optional[str] = None,
    ) -> Optional[T]:
        """One in-flight call per key; refetch on success, classify on failure."""
        with self._in_flight_lock:
            duplicate = key in self._in_flight
            if not duplicate:
                self._in_flight.add(key)
        if duplicate:
            logger.warning(f"Ignoring duplicate request while '{key}' is in flight")
            self._notify(NotificationLevel.WARNING, "Operação em andamento", "Aguarde a conclusão da operação anterior.")
            return None

        try:
            result = operation()
        except PousadaError as e:
            logger.error(f"Operation '{key}' failed: {e}")
            self._report_failure(e)
            return None
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(key)

        self._notify(NotificationLevel.SUCCESS, success_title, success_description)
        self.refresh()
        return result

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    # ------------------------------------
    # Guests
    # ------------------------------------
    def _guest_from_input(self, full_name: str, tax_id: str, phone: str) -> Guest:
        full_name = (full_name or "").strip()
        tax_id = (tax_id or "").strip()
        if not full_name:
            raise ValidationError("Informe o nome do hóspede.")
        if not tax_id:
            raise ValidationError("Informe o CPF do hóspede.")
        return Guest(full_name=full_name, tax_id=tax_id, phone=(phone or "").strip())

    def create_guest(self, full_name: str, tax_id: str, phone: str) -> Optional[Guest]:
        try:
            guest = self._guest_from_input(full_name, tax_id, phone)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, str(e))
            return None
        return self._run(
            "guest:new",
            lambda: self.backend.create_guest(guest),
            "Hóspede cadastrado",
            f"{guest.full_name} foi adicionado ao sistema.",
        )

    def update_guest(self, guest_id: int, full_name: str, tax_id: str, phone: str) -> Optional[Guest]:
        try:
            guest = self._guest_from_input(full_name, tax_id, phone)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, str(e))
            return None
        guest.id = guest_id
        return self._run(
            f"guest:{guest_id}",
            lambda: self.backend.update_guest(guest_id, guest),
            "Hóspede atualizado",
            f"Os dados de {guest.full_name} foram atualizados.",
        )

    def delete_guest(self, guest_id: int) -> bool:
        """Deletion is never blocked; reservations pointing at the guest become orphaned."""
        guest = self.find_guest(guest_id)
        name = guest.full_name if guest else f"#{guest_id}"
        if guest is not None:
            warning = self.guest_deletion_warning(guest)
            if warning:
                self._notify(NotificationLevel.WARNING, "Hóspede com reservas", warning)

        def _delete() -> bool:
            self.backend.delete_guest(guest_id)
            return True

        result = self._run(
            f"guest:{guest_id}",
            _delete,
            "Hóspede deletado",
            f"{name} foi removido do sistema.",
        )
        return bool(result)

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def create_room(self, number: Any, room_type: Any, nightly_rate: Any) -> Optional[Room]:
        try:
            room = Room(
                number=int(number),
                room_type=room_type if isinstance(room_type, RoomType) else RoomType(normalize_token(room_type)),
                nightly_rate=float(str(nightly_rate).replace(",", ".")),
            )
        except (TypeError, ValueError):
            self._notify(
                NotificationLevel.ERROR,
                VALIDATION_TITLE,
                "Verifique o número, o tipo e o preço por noite do quarto.",
            )
            return None
        if room.number <= 0 or room.nightly_rate < 0:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, "Número e preço do quarto devem ser positivos.")
            return None

        if room.room_type in LOSSY_ROOM_TYPES:
            self._notify(
                NotificationLevel.INFO,
                "Tipo de quarto",
                f"O servidor registra o tipo {room.room_type.value} como {ROOM_TYPE_TO_WIRE[room.room_type]}.",
            )

        return self._run(
            f"room:{room.number}",
            lambda: self.backend.create_room(room),
            "Quarto cadastrado",
            f"Quarto {room.number} foi adicionado.",
        )

    def update_room_status(self, room_number: int, status: Any) -> Optional[Room]:
        try:
            new_status = status if isinstance(status, RoomStatus) else RoomStatus(normalize_token(status))
        except ValueError:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, f"Status de quarto inválido: {status}")
            return None

        current = self.find_room(room_number)
        if current is not None and current.status == new_status:
            self._notify(NotificationLevel.INFO, "Nenhuma alteração", f"Quarto {room_number} já está com este status.")
            return current

        return self._run(
            f"room:{room_number}",
            lambda: self.backend.update_room_status(room_number, new_status),
            "Status atualizado",
            f"Quarto {room_number} atualizado.",
        )

    # ------------------------------------
    # Reservations
    # ------------------------------------
    def quote_reservation(
        self,
        guest_id: Optional[int],
        room_number: Optional[int],
        check_in: Any,
        check_out: Any,
        payment_method: Any = None,
    ) -> BookingRequest:
        """Validates and prices a booking against the current snapshot (no network).

        Raises:
            BookingValidationError
        """
        room = self.find_room(room_number) if room_number is not None else None
        if room_number is not None and room is None:
            raise BookingValidationError(f"Quarto {room_number} não encontrado.")
        return quote_booking(
            guest_id,
            room,
            check_in,
            check_out,
            payment_method or self.default_payment_method,
        )

    def create_reservation(
        self,
        guest_id: Optional[int],
        room_number: Optional[int],
        check_in: Any,
        check_out: Any,
        payment_method: Any = None,
    ) -> Optional[Reservation]:
        """
        Rejects invalid requests before any network call. The returned
        reservation's ``total_amount`` is the authoritative one.
        """
        try:
            request = self.quote_reservation(guest_id, room_number, check_in, check_out, payment_method)
        except ValidationError as e:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, str(e))
            return None

        return self._run(
            f"reservation:new:{request.room_number}",
            lambda: self.backend.create_reservation(request),
            "Reserva criada com sucesso!",
        )

    def check_in(self, reservation_id: int) -> Optional[Reservation]:
        return self._run(
            f"reservation:{reservation_id}",
            lambda: self.backend.check_in(reservation_id),
            "Check-in realizado",
            "Check-in feito com sucesso!",
        )

    def check_out(self, reservation_id: int) -> Optional[Reservation]:
        return self._run(
            f"reservation:{reservation_id}",
            lambda: self.backend.check_out(reservation_id),
            "Check-out realizado",
            "Check-out feito com sucesso!",
        )

    def return_key(self, reservation_id: int) -> Optional[Reservation]:
        return self._run(
            f"reservation:{reservation_id}",
            lambda: self.backend.return_key(reservation_id),
            "Chave devolvida",
            "Chave registrada como devolvida.",
        )

    def process_payment(self, reservation_id: int, method: Optional[PaymentMethod] = None) -> Optional[Reservation]:
        method = method or self.default_payment_method
        return self._run(
            f"reservation:{reservation_id}",
            lambda: self.backend.process_payment(reservation_id, method),
            "Pagamento processado",
            "Pagamento registrado com sucesso!",
        )

    def cancel_reservation(self, reservation_id: int) -> Optional[Reservation]:
        return self._run(
            f"reservation:{reservation_id}",
            lambda: self.backend.cancel_reservation(reservation_id),
            "Reserva cancelada",
            "A reserva foi cancelada com sucesso.",
        )

    def perform(self, reservation_id: int, action: ReservationAction) -> Optional[Reservation]:
        """Dispatches a panel button. Actions the snapshot does not offer are refused locally."""
        action = ReservationAction(action)
        reservation = self.find_reservation(reservation_id)
        if (
            reservation is not None
            and action != ReservationAction.CHECK_IN
            and not can_perform(reservation, action)
        ):
            self._notify(
                NotificationLevel.WARNING,
                "Ação indisponível",
                f"{ACTION_LABELS[action]} não está disponível para a reserva {reservation.get_reference_code()}.",
            )
            return None

        handlers: Dict[ReservationAction, Callable[[int], Optional[Reservation]]] = {
            ReservationAction.CHECK_IN: self.check_in,
            ReservationAction.PROCESS_PAYMENT: self.process_payment,
            ReservationAction.RETURN_KEY: self.return_key,
            ReservationAction.CHECK_OUT: self.check_out,
            ReservationAction.CANCEL: self.cancel_reservation,
        }
        return handlers[action](reservation_id)

    # ------------------------------------
    # Reports
    # ------------------------------------
    def revenue_report(self, start: Any, end: Any) -> Optional[float]:
        start_date: Optional[date] = parse_date(start)
        end_date: Optional[date] = parse_date(end)
        if start_date is None or end_date is None:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, "Por favor, preencha as duas datas.")
            return None
        if end_date < start_date:
            self._notify(NotificationLevel.ERROR, VALIDATION_TITLE, "Data final deve ser posterior à data inicial.")
            return None

        try:
            return self.backend.revenue(start_date, end_date)
        except PousadaError as e:
            logger.error(f"Revenue report failed: {e}")
            self._report_failure(e)
            return None
