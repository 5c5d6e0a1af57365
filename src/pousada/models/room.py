from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RoomType(str, Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    SUITE = "SUITE"
    DELUXE = "DELUXE"


class RoomStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"
    CLEANING = "CLEANING"


ROOM_TYPE_LABELS = {
    RoomType.SINGLE: "Single",
    RoomType.DOUBLE: "Double",
    RoomType.SUITE: "Suíte",
    RoomType.DELUXE: "Deluxe",
}

ROOM_STATUS_LABELS = {
    RoomStatus.AVAILABLE: "Disponível",
    RoomStatus.OCCUPIED: "Ocupado",
    RoomStatus.MAINTENANCE: "Manutenção",
    RoomStatus.CLEANING: "Limpeza",
}


@dataclass
class Room:
    """A room of the pousada.

    ``number``, ``room_type`` and ``nightly_rate`` are fixed once the room is
    created; only ``status`` changes afterwards.
    """

    number: int
    room_type: RoomType
    nightly_rate: float

    id: Optional[int] = field(default=None)
    status: RoomStatus = field(default=RoomStatus.AVAILABLE)

    def with_status(self, status: RoomStatus) -> Room:
        """Returns a copy carrying a new status; the other fields never change."""
        return Room(
            number=self.number,
            room_type=self.room_type,
            nightly_rate=self.nightly_rate,
            id=self.id,
            status=RoomStatus(status),
        )
