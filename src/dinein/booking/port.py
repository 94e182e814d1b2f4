"""Booking directory port (abstract interface).

Looks up the active hotel booking whose room list includes a table number,
so that restaurant orders can be charged to a stay.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingRecord:
    booking_id: str
    grc_no: str | None = None
    room_number: str = ""  # comma-separated room/table numbers
    guest_name: str | None = None
    guest_phone: str | None = None
    status: str = "Booked"
    is_active: bool = True


class BookingDirectory(ABC):
    """Abstract booking lookup."""

    @abstractmethod
    def find_active_booking_for_table(self, table_number: str) -> BookingRecord | None:
        """Return an active booking covering ``table_number``, if any."""
        ...
