import pytest
from protean.integrations.pytest import DomainFixture

from dinein.audit import reset_audit_log, set_audit_log
from dinein.audit.memory_adapter import InMemoryAuditLog
from dinein.booking import reset_booking_directory, set_booking_directory
from dinein.booking.memory_adapter import InMemoryBookingDirectory
from dinein.catalog import reset_catalog, set_catalog
from dinein.catalog.memory_adapter import InMemoryCatalog


@pytest.fixture(scope="session")
def dinein_bed():
    from dinein.domain import dinein

    bed = DomainFixture(dinein)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(dinein_bed):
    with dinein_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    """A small menu: one main course with a variation and addons, plus a drink."""
    menu = InMemoryCatalog()
    menu.add_menu_item("menu-thali", "Veg Thali", 100.0, prep_time_minutes=20)
    menu.add_menu_item("menu-lassi", "Sweet Lassi", 40.0)
    menu.add_menu_item("menu-naan", "Butter Naan", 30.0, prep_time_minutes=5)
    menu.add_variation("var-large", "Large", 150.0)
    menu.add_addon("addon-paneer", "Extra Paneer", 20.0)
    menu.add_addon("addon-ghee", "Ghee", 10.0)
    set_catalog(menu)
    yield menu
    reset_catalog()


@pytest.fixture(autouse=True)
def audit_log():
    log = InMemoryAuditLog()
    set_audit_log(log)
    yield log
    reset_audit_log()


@pytest.fixture()
def bookings():
    directory = InMemoryBookingDirectory()
    set_booking_directory(directory)
    yield directory
    reset_booking_directory()
