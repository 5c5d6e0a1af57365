from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Guest:
    """A guest of the pousada."""

    full_name: str
    tax_id: str  # CPF, digits or masked
    phone: str

    id: Optional[int] = field(default=None)
