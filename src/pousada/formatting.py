"""
Display helpers shared by the panel: currency, dates, CPF / phone masks and
Telegram MarkdownV2 escaping.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Optional

MARKDOWN_V2_SPECIAL = r'_*[]()~`>#+-=|{}.!'


def escape_markdown_v2(text: Any) -> str:
    """Escapes the characters Telegram reserves in MarkdownV2."""
    if text is None:
        return ""
    return re.sub(f'([{re.escape(MARKDOWN_V2_SPECIAL)}])', r'\\\1', str(text))


def parse_date(value: Any) -> Optional[date]:
    """
    Accepts a ``date``, a ``datetime``, an ISO string (``2024-01-15``, with or
    without a time part) or a Brazilian ``dd/mm/yyyy`` / ``ddmmyyyy`` string.

    Returns None for empty or unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    digits = re.sub(r"\D", "", text)
    if len(digits) != 8:
        return None
    try:
        return date(int(digits[4:8]), int(digits[2:4]), int(digits[0:2]))
    except ValueError:
        return None


def format_date_br(value: Any) -> str:
    """yyyy-mm-dd -> dd/mm/yyyy. Unparseable input is returned as-is."""
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.strftime("%d/%m/%Y")


def format_brl(amount: Optional[float]) -> str:
    """1750.5 -> 'R$ 1.750,50'."""
    if amount is None:
        amount = 0.0
    sign = "-" if amount < 0 else ""
    whole = f"{abs(amount):,.2f}"
    # en-US grouping to pt-BR grouping
    whole = whole.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {whole}"


def format_cpf(cpf: Optional[str]) -> str:
    if not cpf:
        return ""
    digits = re.sub(r"\D", "", cpf)
    if len(digits) != 11:
        return cpf
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_phone(phone: Optional[str]) -> str:
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return phone


def format_percent(value: float) -> str:
    return f"{value:.1f}%".replace(".", ",")
