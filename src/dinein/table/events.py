"""Domain events for the Table aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from dinein.domain import dinein


@dinein.event(part_of="Table")
class TableRegistered:
    __version__ = 1

    table_id = Identifier(required=True)
    table_number = String(required=True)
    capacity = Integer()
    registered_at = DateTime(required=True)


@dinein.event(part_of="Table")
class TableOccupied:
    __version__ = 1

    table_id = Identifier(required=True)
    table_number = String(required=True)
    order_id = Identifier()
    occupied_at = DateTime(required=True)


@dinein.event(part_of="Table")
class TableReleased:
    __version__ = 1

    table_id = Identifier(required=True)
    table_number = String(required=True)
    order_id = Identifier()
    status = String(required=True)
    released_at = DateTime(required=True)
