"""
Translation between the backend's wire format and the panel's models.

The backend spells its enums in Portuguese (sometimes with accents) and uses
its own field names. Decoders are tolerant readers: they never raise, and
every value they cannot map is replaced by a documented default and logged
as a warning so data drift stays visible. Encoders produce what the backend
accepts; round trips are not guaranteed to be lossless.
"""
from __future__ import annotations

import logging
import unicodedata
from datetime import date
from typing import Any, Dict, Mapping, Optional, TypeVar

from pousada.formatting import parse_date
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

logger = logging.getLogger(__name__)

E = TypeVar("E")

# ------------------------------------
# Wire vocabularies
# ------------------------------------

ROOM_TYPE_FROM_WIRE: Dict[str, RoomType] = {
    "SOLTEIRO": RoomType.SINGLE,
    "CASAL": RoomType.DOUBLE,
    "TRIPLA": RoomType.SUITE,
}

ROOM_TYPE_TO_WIRE: Dict[RoomType, str] = {
    RoomType.SINGLE: "SOLTEIRO",
    RoomType.DOUBLE: "CASAL",
    RoomType.SUITE: "TRIPLA",
    RoomType.DELUXE: "TRIPLA",
}

# Types that share a backend code with another type and therefore come back
# decoded as something else.
LOSSY_ROOM_TYPES = frozenset({RoomType.DELUXE})

ROOM_STATUS_FROM_WIRE: Dict[str, RoomStatus] = {
    "DISPONIVEL": RoomStatus.AVAILABLE,
    "OCUPADO": RoomStatus.OCCUPIED,
    "MANUTENCAO": RoomStatus.MAINTENANCE,
    "LIMPEZA": RoomStatus.CLEANING,
}

# The backend has no cleaning state: a room being cleaned is sent back as
# available.
ROOM_STATUS_TO_WIRE: Dict[RoomStatus, str] = {
    RoomStatus.AVAILABLE: "DISPONIVEL",
    RoomStatus.OCCUPIED: "OCUPADO",
    RoomStatus.MAINTENANCE: "MANUTENÇÃO",
    RoomStatus.CLEANING: "DISPONIVEL",
}

RESERVATION_STATUS_FROM_WIRE: Dict[str, ReservationStatus] = {
    "ATIVA": ReservationStatus.ACTIVE,
    "CANCELADA": ReservationStatus.CANCELLED,
    "FINALIZADA": ReservationStatus.COMPLETED,
}

PAYMENT_STATUS_FROM_WIRE: Dict[str, PaymentStatus] = {
    "PENDENTE": PaymentStatus.PENDING,
    "PAGO": PaymentStatus.PAID,
}

KEY_STATUS_FROM_WIRE: Dict[str, KeyStatus] = {
    "NAO_DEVOLVIDA": KeyStatus.NOT_RETURNED,
    "DEVOLVIDA": KeyStatus.RETURNED,
}

DEFAULT_PAYMENT_METHOD = PaymentMethod.DINHEIRO


# ------------------------------------
# Helpers
# ------------------------------------

def normalize_token(value: Any) -> str:
    """'Manutenção' -> 'MANUTENCAO'. Non-strings become ''."""
    if not isinstance(value, str):
        return ""
    decomposed = unicodedata.normalize("NFKD", value.strip())
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.upper().replace(" ", "_").replace("-", "_")


def _lookup(table: Mapping[str, E], raw: Any, default: E, field_name: str) -> E:
    mapped = table.get(normalize_token(raw))
    if mapped is None:
        logger.warning(f"Unknown {field_name} value from backend: {raw!r}; using {default.value}")
        return default
    return mapped


def _as_int(raw: Any, field_name: str, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {field_name} value from backend: {raw!r}; using {default}")
        return default


def _as_optional_int(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid id from backend: {raw!r}")
        return None


def _as_float(raw: Any, field_name: str) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {field_name} value from backend: {raw!r}; using 0.0")
        return 0.0


def _as_str(raw: Any) -> str:
    return "" if raw is None else str(raw)


def _as_date(raw: Any, field_name: str) -> date:
    parsed = parse_date(raw)
    if parsed is None:
        logger.warning(f"Invalid {field_name} value from backend: {raw!r}; using 1970-01-01")
        return date(1970, 1, 1)
    return parsed


def _payload(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    logger.warning(f"Expected a JSON object from backend, got {type(raw).__name__}")
    return {}


# ------------------------------------
# Decoders (backend -> panel)
# ------------------------------------

def decode_room_type(raw: Any) -> RoomType:
    return _lookup(ROOM_TYPE_FROM_WIRE, raw, RoomType.SINGLE, "tipo")


def decode_room_status(raw: Any) -> RoomStatus:
    return _lookup(ROOM_STATUS_FROM_WIRE, raw, RoomStatus.AVAILABLE, "status")


def decode_payment_method(raw: Any) -> Optional[PaymentMethod]:
    if raw is None or raw == "":
        return None
    token = normalize_token(raw)
    try:
        return PaymentMethod(token)
    except ValueError:
        logger.warning(f"Unknown metodoPagamento value from backend: {raw!r}")
        return None


def decode_guest(raw: Any) -> Guest:
    data = _payload(raw)
    return Guest(
        id=_as_optional_int(data.get("id")),
        tax_id=_as_str(data.get("cpf")),
        full_name=_as_str(data.get("nome")),
        phone=_as_str(data.get("telefone")),
    )


def decode_room(raw: Any) -> Room:
    data = _payload(raw)
    return Room(
        id=_as_optional_int(data.get("id")),
        number=_as_int(data.get("numero"), "numero"),
        room_type=decode_room_type(data.get("tipo")),
        nightly_rate=_as_float(data.get("precoPorNoite"), "precoPorNoite"),
        status=decode_room_status(data.get("status")),
    )


def decode_reservation(raw: Any) -> Reservation:
    data = _payload(raw)
    room_type = data.get("tipoQuarto")
    return Reservation(
        id=_as_optional_int(data.get("id")),
        guest_name=_as_str(data.get("nomeHospede")),
        room_number=_as_int(data.get("numeroQuarto"), "numeroQuarto"),
        check_in=_as_date(data.get("dataCheckIn"), "dataCheckIn"),
        check_out=_as_date(data.get("dataCheckOut"), "dataCheckOut"),
        total_amount=_as_float(data.get("valorTotal"), "valorTotal"),
        reservation_status=_lookup(
            RESERVATION_STATUS_FROM_WIRE, data.get("statusReserva"), ReservationStatus.ACTIVE, "statusReserva"
        ),
        payment_status=_lookup(
            PAYMENT_STATUS_FROM_WIRE, data.get("statusPagamento"), PaymentStatus.PENDING, "statusPagamento"
        ),
        key_status=_lookup(
            KEY_STATUS_FROM_WIRE, data.get("statusChave"), KeyStatus.NOT_RETURNED, "statusChave"
        ),
        guest_tax_id=_as_str(data.get("cpfHospede")) or None,
        guest_phone=_as_str(data.get("telefoneHospede")) or None,
        room_type=decode_room_type(room_type) if room_type is not None else None,
        payment_method=decode_payment_method(data.get("metodoPagamento")),
    )


# ------------------------------------
# Encoders (panel -> backend)
# ------------------------------------

def encode_guest(guest: Guest) -> Dict[str, Any]:
    return {
        "nome": guest.full_name,
        "cpf": guest.tax_id,
        "telefone": guest.phone,
    }


def encode_room_create(room: Room) -> Dict[str, Any]:
    """Only number, type and rate are sent; the backend owns the initial status."""
    room_type = RoomType(room.room_type)
    if room_type in LOSSY_ROOM_TYPES:
        logger.info(f"Room type {room_type.value} is sent as {ROOM_TYPE_TO_WIRE[room_type]}")
    return {
        "numero": room.number,
        "tipo": ROOM_TYPE_TO_WIRE[room_type],
        "precoPorNoite": room.nightly_rate,
    }


def encode_room_status_update(status: RoomStatus) -> Dict[str, str]:
    """Query parameters for ``PUT /quartos/{numero}/status``."""
    return {"status": ROOM_STATUS_TO_WIRE[RoomStatus(status)]}


def encode_reservation_create(request: BookingRequest) -> Dict[str, Any]:
    method = request.payment_method or DEFAULT_PAYMENT_METHOD
    return {
        "hospedeId": request.guest_id,
        "numeroQuarto": request.room_number,
        "dataCheckIn": request.check_in.isoformat(),
        "dataCheckOut": request.check_out.isoformat(),
        "metodoPagamento": PaymentMethod(method).value,
    }


def encode_payment_method(method: Optional[PaymentMethod]) -> Dict[str, str]:
    """Query parameters for ``PUT /reservas/{id}/pagamento``."""
    return {"metodoPagamento": PaymentMethod(method or DEFAULT_PAYMENT_METHOD).value}
