"""
Maps raw backend failures to the (title, description) pair shown to the
operator.

This is the single classification table of the panel. Lookup order:

1. if the text embeds a JSON object with a ``message`` field, that message
   is used from here on;
2. the first known backend exception identifier found in the text;
3. substring heuristics (occupied room, date check, connectivity, generic
   operation failure);
4. a generic title with the message kept verbatim.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, List, Tuple

from pousada.exceptions import ValidationError


@dataclass(frozen=True)
class ErrorInfo:
    title: str
    description: str


GENERIC_TITLE = "Erro"
GENERIC_DESCRIPTION = "Ocorreu um erro inesperado."
CONNECTION_TITLE = "Erro de conexão"
CONNECTION_DESCRIPTION = "Não foi possível conectar ao servidor. Verifique sua conexão."
VALIDATION_TITLE = "Dados inválidos"

# Ordered: the first identifier contained in the message wins.
KNOWN_EXCEPTIONS: List[Tuple[str, ErrorInfo]] = [
    # Guests
    ("CpfJaCadastradoException", ErrorInfo(
        "CPF já cadastrado", "Este CPF já está registrado no sistema.")),
    ("HospedeNotFoundException", ErrorInfo(
        "Hóspede não encontrado", "O hóspede solicitado não foi encontrado.")),
    # Rooms
    ("NumeroQuartoJaCadastradoException", ErrorInfo(
        "Número de quarto já existe", "Já existe um quarto com este número.")),
    ("QuartoNotFoundException", ErrorInfo(
        "Quarto não encontrado", "O quarto solicitado não foi encontrado.")),
    ("QuartoOcupadoException", ErrorInfo(
        "Quarto ocupado", "Este quarto já possui reserva ativa para o período selecionado.")),
    # Reservations
    ("CheckInInvalidoException", ErrorInfo(
        "Check-in inválido", "Ainda não é possível fazer check-in para esta reserva.")),
    ("PagamentoInvalidoException", ErrorInfo(
        "Pagamento pendente", "O pagamento desta reserva ainda não foi processado.")),
    ("ReservaJaCanceladaException", ErrorInfo(
        "Reserva cancelada", "Esta reserva já foi cancelada anteriormente.")),
    ("ReservaNotFoundExceptionById", ErrorInfo(
        "Reserva não encontrada", "A reserva solicitada não foi encontrada.")),
    ("ReservaNotFoundExceptionByNumber", ErrorInfo(
        "Reserva não encontrada", "Não foi encontrada reserva para o número informado.")),
    # Generic
    ("BusinessException", ErrorInfo(
        "Erro de validação", "Não foi possível completar a operação.")),
]

_JSON_FRAGMENT = re.compile(r"\{.*\}", re.DOTALL)
_CREATE_RESERVATION_PREFIX = "Falha ao criar reserva. "


def extract_message(raw: str) -> str:
    """Returns the ``message`` of an embedded JSON object, or ``raw`` unchanged."""
    match = _JSON_FRAGMENT.search(raw)
    if not match:
        return raw
    try:
        data = json.loads(match.group(0))
    except ValueError:
        return raw
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
    return raw


def classify_failure(raw: Any) -> ErrorInfo:
    """Pure: same input, same (title, description)."""
    if raw is None:
        return ErrorInfo(GENERIC_TITLE, GENERIC_DESCRIPTION)
    text = raw if isinstance(raw, str) else str(raw)
    if not text.strip():
        return ErrorInfo(GENERIC_TITLE, GENERIC_DESCRIPTION)

    message = extract_message(text)

    for identifier, info in KNOWN_EXCEPTIONS:
        if identifier in message:
            return info

    lowered = message.lower()
    if "quarto" in lowered and "ocupado" in lowered:
        return ErrorInfo("Quarto ocupado", message)
    if "verifique se as datas" in lowered:
        return ErrorInfo("Datas inválidas", message)
    if "failed to fetch" in lowered:
        return ErrorInfo(CONNECTION_TITLE, CONNECTION_DESCRIPTION)
    if "falha ao" in lowered:
        return ErrorInfo("Erro na operação", message.replace(_CREATE_RESERVATION_PREFIX, ""))

    return ErrorInfo(GENERIC_TITLE, message)


def classify_exception(exc: BaseException) -> ErrorInfo:
    """Local validation errors keep their own message; anything else is classified by text."""
    if isinstance(exc, ValidationError):
        return ErrorInfo(VALIDATION_TITLE, str(exc))
    return classify_failure(str(exc))
