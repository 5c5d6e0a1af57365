from datetime import date, datetime

import pytest

from pousada.formatting import (
    escape_markdown_v2,
    format_brl,
    format_cpf,
    format_date_br,
    format_percent,
    format_phone,
    parse_date,
)


@pytest.mark.parametrize("raw,expected", [
    ("2024-01-15", date(2024, 1, 15)),
    ("2024-01-15T10:30:00", date(2024, 1, 15)),
    ("15/01/2024", date(2024, 1, 15)),
    (date(2024, 1, 15), date(2024, 1, 15)),
    (datetime(2024, 1, 15, 23, 59), date(2024, 1, 15)),
    ("", None),
    ("31/02/2024", None),
    ("amanhã", None),
    (None, None),
    (20240115, None),
])
def test_parse_date(raw, expected):
    assert parse_date(raw) == expected


def test_format_date_br():
    assert format_date_br("2024-01-15") == "15/01/2024"
    assert format_date_br(date(2024, 12, 1)) == "01/12/2024"
    assert format_date_br("sem data") == "sem data"


def test_format_brl():
    assert format_brl(1750.5) == "R$ 1.750,50"
    assert format_brl(0) == "R$ 0,00"
    assert format_brl(1234567.891) == "R$ 1.234.567,89"
    assert format_brl(None) == "R$ 0,00"
    assert format_brl(-10) == "-R$ 10,00"


def test_format_cpf_and_phone():
    assert format_cpf("12345678900") == "123.456.789-00"
    assert format_cpf("123") == "123"
    assert format_phone("11987654321") == "(11) 98765-4321"
    assert format_phone("1133334444") == "(11) 3333-4444"
    assert format_phone("") == ""


def test_format_percent():
    assert format_percent(50.0) == "50,0%"
    assert format_percent(12.345) == "12,3%"


def test_escape_markdown_v2():
    assert escape_markdown_v2("RSV-000001 (2).") == "RSV\\-000001 \\(2\\)\\."
    assert escape_markdown_v2(None) == ""
    assert escape_markdown_v2(150) == "150"
