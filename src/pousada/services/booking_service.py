"""Client-side pricing and validation of booking requests."""
from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Any, Optional

from pousada.exceptions import BookingValidationError
from pousada.formatting import parse_date
from pousada.models import BookingRequest, PaymentMethod, Room

ONE_DAY = timedelta(days=1)


def _to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    parsed = parse_date(value)
    if parsed is None:
        return None
    return datetime(parsed.year, parsed.month, parsed.day)


def count_nights(check_in: Any, check_out: Any) -> int:
    """
    ceil((check_out - check_in) / 1 day). May be zero or negative when the
    range is empty or inverted.

    Raises:
        BookingValidationError: when a date is missing or unparseable.
    """
    start = _to_datetime(check_in)
    end = _to_datetime(check_out)
    if start is None:
        raise BookingValidationError("Data de check-in ausente ou inválida.")
    if end is None:
        raise BookingValidationError("Data de check-out ausente ou inválida.")
    return math.ceil((end - start) / ONE_DAY)


def preview_amount(room: Room, check_in: Any, check_out: Any) -> float:
    """nightly_rate × max(0, nights). Advisory only, the backend sets the real total."""
    nights = count_nights(check_in, check_out)
    return room.nightly_rate * max(0, nights)


def quote_booking(
    guest_id: Optional[int],
    room: Optional[Room],
    check_in: Any,
    check_out: Any,
    payment_method: Any = PaymentMethod.DINHEIRO,
) -> BookingRequest:
    """
    Validates and prices a booking before it is sent.

    Returns:
        BookingRequest with the night count and the preview amount.

    Raises:
        BookingValidationError: missing guest / room / date, unknown payment
        method, or check-out not strictly after check-in.
    """
    if guest_id is None:
        raise BookingValidationError("Selecione um hóspede.")
    if room is None:
        raise BookingValidationError("Selecione um quarto.")

    nights = count_nights(check_in, check_out)
    if nights <= 0:
        raise BookingValidationError("A data de check-out deve ser posterior à data de check-in.")

    try:
        method = PaymentMethod(payment_method or PaymentMethod.DINHEIRO)
    except ValueError as e:
        raise BookingValidationError(f"Método de pagamento inválido: {payment_method}") from e

    start: date = parse_date(check_in) if not isinstance(check_in, datetime) else check_in.date()
    end: date = parse_date(check_out) if not isinstance(check_out, datetime) else check_out.date()

    return BookingRequest(
        guest_id=int(guest_id),
        room_number=room.number,
        check_in=start,
        check_out=end,
        nights=nights,
        preview_amount=room.nightly_rate * nights,
        payment_method=method,
    )
