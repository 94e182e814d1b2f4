"""In-memory booking directory for development and testing."""

import re

from dinein.booking.port import BookingDirectory, BookingRecord

ACTIVE_BOOKING_STATUSES = frozenset({"Booked", "Checked In"})


def room_list_matcher(table_number: str) -> re.Pattern:
    """Match ``table_number`` as one entry of a comma-separated room list."""
    return re.compile(rf"(^|,)\s*{re.escape(str(table_number))}\s*(,|$)")


class InMemoryBookingDirectory(BookingDirectory):
    """List-backed booking directory. First matching booking wins."""

    def __init__(self, bookings: list[BookingRecord] | None = None) -> None:
        self.bookings: list[BookingRecord] = list(bookings or [])

    def add_booking(self, booking: BookingRecord) -> BookingRecord:
        self.bookings.append(booking)
        return booking

    def find_active_booking_for_table(self, table_number: str) -> BookingRecord | None:
        matcher = room_list_matcher(table_number)
        for booking in self.bookings:
            if booking.status not in ACTIVE_BOOKING_STATUSES or not booking.is_active:
                continue
            if matcher.search(booking.room_number or ""):
                return booking
        return None
