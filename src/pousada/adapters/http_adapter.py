from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from pousada.adapters.wire import (
    decode_guest,
    decode_reservation,
    decode_room,
    encode_guest,
    encode_payment_method,
    encode_reservation_create,
    encode_room_create,
    encode_room_status_update,
)
from pousada.exceptions import BackendError, BackendUnavailableError
from pousada.models import BookingRequest, Guest, PaymentMethod, Reservation, Room, RoomStatus

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8080/aconchega"
DEFAULT_TIMEOUT = 10.0


class HttpPousadaAdapter:
    """Backend client over httpx.

    Every call is a single request/response: no retries, no caching. A
    non-2xx answer raises ``BackendError`` carrying the response body, a
    transport failure raises ``BackendUnavailableError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        logger.info(f"HttpPousadaAdapter ready. Backend: {self.base_url}")

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpPousadaAdapter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------
    # Transport
    # ------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        failure_message: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        logger.debug(f"{method} {path} params={params}")
        try:
            response = self._client.request(method, path, json=json, params=params)
        except httpx.RequestError as e:
            logger.error(f"{method} {path} connection error: {e}")
            raise BackendUnavailableError(f"Failed to fetch: {e}") from e

        if response.is_success:
            return response

        body = response.text
        logger.error(f"{method} {path} -> HTTP {response.status_code}: {body}")
        raise BackendError(body.strip() or failure_message, status_code=response.status_code, body=body)

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(
                f"Resposta inválida do servidor: {response.text[:200]}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def _list(self, path: str, failure_message: str) -> List[Any]:
        data = self._json(self._request("GET", path, failure_message))
        if not isinstance(data, list):
            raise BackendError(f"{failure_message}: resposta não é uma lista", body=str(data))
        return data

    # ------------------------------------
    # Guests
    # ------------------------------------
    def list_guests(self) -> List[Guest]:
        return [decode_guest(item) for item in self._list("/pousada/hospedes", "Falha ao buscar hóspedes")]

    def create_guest(self, guest: Guest) -> Guest:
        response = self._request("POST", "/pousada/hospedes", "Falha ao criar hóspede", json=encode_guest(guest))
        return decode_guest(self._json(response))

    def update_guest(self, guest_id: int, guest: Guest) -> Guest:
        response = self._request(
            "PUT", f"/pousada/hospedes/{guest_id}", "Falha ao atualizar hóspede", json=encode_guest(guest)
        )
        return decode_guest(self._json(response))

    def delete_guest(self, guest_id: int) -> None:
        self._request("DELETE", f"/pousada/hospedes/{guest_id}", "Falha ao deletar hóspede")

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def list_rooms(self) -> List[Room]:
        return [decode_room(item) for item in self._list("/pousada/quartos", "Falha ao buscar quartos")]

    def create_room(self, room: Room) -> Room:
        response = self._request("POST", "/pousada/quartos", "Falha ao criar quarto", json=encode_room_create(room))
        return decode_room(self._json(response))

    def update_room_status(self, room_number: int, status: RoomStatus) -> Room:
        response = self._request(
            "PUT",
            f"/pousada/quartos/{room_number}/status",
            "Falha ao atualizar status do quarto",
            params=encode_room_status_update(status),
        )
        return decode_room(self._json(response))

    # ------------------------------------
    # Reservations
    # ------------------------------------
    def list_reservations(self) -> List[Reservation]:
        return [decode_reservation(item) for item in self._list("/pousada/reservas", "Falha ao buscar reservas")]

    def create_reservation(self, request: BookingRequest) -> Reservation:
        response = self._request(
            "POST", "/pousada/reservas", "Falha ao criar reserva", json=encode_reservation_create(request)
        )
        return decode_reservation(self._json(response))

    def _transition(self, reservation_id: int, action_path: str, failure_message: str,
                    params: Optional[Dict[str, Any]] = None) -> Reservation:
        response = self._request(
            "PUT", f"/pousada/reservas/{reservation_id}/{action_path}", failure_message, params=params
        )
        return decode_reservation(self._json(response))

    def check_in(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, "check-in", "Falha ao fazer check-in")

    def check_out(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, "check-out", "Falha ao fazer check-out")

    def return_key(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, "devolucao-chave", "Falha ao devolver chave")

    def process_payment(self, reservation_id: int, method: Optional[PaymentMethod] = None) -> Reservation:
        return self._transition(
            reservation_id, "pagamento", "Falha ao processar pagamento", params=encode_payment_method(method)
        )

    def cancel_reservation(self, reservation_id: int) -> Reservation:
        return self._transition(reservation_id, "cancelar", "Falha ao cancelar reserva")

    # ------------------------------------
    # Reports
    # ------------------------------------
    def revenue(self, start: date, end: date) -> float:
        response = self._request(
            "GET",
            "/pousada/reservas/receita",
            "Falha ao buscar receita",
            params={"inicio": start.isoformat(), "fim": end.isoformat()},
        )
        value = self._json(response)
        if value is None:
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise BackendError(f"Falha ao buscar receita: valor inválido {value!r}", body=response.text) from e
