"""Booking directory factory.

Provides get_booking_directory() / set_booking_directory() to swap
implementations.
"""

from dinein.booking.memory_adapter import InMemoryBookingDirectory
from dinein.booking.port import BookingDirectory

_current_directory: BookingDirectory | None = None


def get_booking_directory() -> BookingDirectory:
    """Return the current booking directory. Defaults to an empty in-memory one."""
    global _current_directory
    if _current_directory is None:
        _current_directory = InMemoryBookingDirectory()
    return _current_directory


def set_booking_directory(directory: BookingDirectory) -> None:
    """Override the active booking directory (useful for tests)."""
    global _current_directory
    _current_directory = directory


def reset_booking_directory() -> None:
    """Reset to default booking directory."""
    global _current_directory
    _current_directory = None
