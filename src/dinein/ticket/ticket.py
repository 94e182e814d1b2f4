"""Kitchen Ticket aggregate — the kitchen's copy of an order.

One ticket per order, keyed by ``order_id``. It carries what the kitchen
needs to cook and nothing about money. Ticket items mirror the order's line
items and carry the line item's stable id, so every update finds its target
without relying on list positions.

Tickets are written only by the ticket synchronizer and by reconciliation.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from dinein.domain import dinein


def _parse_timestamp(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dinein.entity(part_of="KitchenTicket")
class TicketItem:
    line_item_id = Identifier(required=True)
    kind = String(max_length=10, default="item")
    position = Integer(default=0, min_value=0)
    menu_item_id = Identifier()
    name = String(required=True, max_length=255)
    quantity = Integer(default=1, min_value=1)
    variation = Text()  # JSON: {variation_id, name, price} or null
    addons = Text(default="[]")  # JSON: list of {addon_id, name, price}
    status = String(max_length=20, default="PENDING")
    time_to_prepare = Integer(default=15, min_value=1)
    special_instructions = String(max_length=500)
    started_at = DateTime()
    ready_at = DateTime()
    actual_prep_time = String(max_length=20)

    @classmethod
    def from_snapshot(cls, snapshot: dict):
        """Build a ticket item from an order line item snapshot."""
        return cls(
            line_item_id=snapshot["line_item_id"],
            kind=snapshot.get("kind") or "item",
            position=snapshot.get("position") or 0,
            menu_item_id=snapshot.get("menu_item_id"),
            name=snapshot["name"],
            quantity=snapshot.get("quantity") or 1,
            variation=json.dumps(snapshot["variation"]) if snapshot.get("variation") else None,
            addons=json.dumps(snapshot.get("addons") or []),
            status=snapshot.get("status") or "PENDING",
            time_to_prepare=snapshot.get("time_to_prepare") or 15,
            special_instructions=snapshot.get("special_instructions"),
            started_at=_parse_timestamp(snapshot.get("started_at")),
            ready_at=_parse_timestamp(snapshot.get("ready_at")),
            actual_prep_time=snapshot.get("actual_prep_time"),
        )


@dinein.aggregate
class KitchenTicket:
    order_id = Identifier(required=True, unique=True)
    order_number = String(max_length=50)
    table_number = String(max_length=50)
    customer_name = String(max_length=255)
    status = String(max_length=20, default="PENDING")
    priority = String(max_length=10, default="NORMAL")
    ticket_items = HasMany(TicketItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def open(
        cls,
        order_id: str,
        order_number: str,
        table_number: str | None,
        customer_name: str | None,
        status: str,
        priority: str,
        items: list[dict],
    ):
        now = datetime.now(UTC)
        ticket = cls(
            order_id=order_id,
            order_number=order_number,
            table_number=table_number,
            customer_name=customer_name,
            status=status,
            priority=priority,
            created_at=now,
            updated_at=now,
        )
        for snapshot in items:
            ticket.add_ticket_items(TicketItem.from_snapshot(snapshot))
        return ticket

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def _of_kind(self, kind: str) -> list[TicketItem]:
        return sorted(
            (item for item in (self.ticket_items or []) if item.kind == kind),
            key=lambda item: item.position,
        )

    @property
    def items(self) -> list[TicketItem]:
        return self._of_kind("item")

    @property
    def extra_items(self) -> list[TicketItem]:
        return self._of_kind("extra")

    def find_item(self, line_item_id) -> TicketItem:
        for item in self.ticket_items or []:
            if str(item.line_item_id) == str(line_item_id):
                return item
        raise ObjectNotFoundError(
            {"line_item_id": [f"Ticket for order {self.order_id} has no item {line_item_id}"]}
        )

    # -------------------------------------------------------------------
    # Mirroring
    # -------------------------------------------------------------------
    def _touch(self) -> None:
        self.updated_at = datetime.now(UTC)

    def append_items(self, items: list[dict]) -> None:
        """Append snapshots, skipping line items the ticket already has."""
        known = {str(item.line_item_id) for item in self.ticket_items or []}
        for snapshot in items:
            if str(snapshot["line_item_id"]) in known:
                continue
            self.add_ticket_items(TicketItem.from_snapshot(snapshot))
        self._touch()

    def mirror_item_status(
        self,
        line_item_id,
        status: str,
        started_at=None,
        ready_at=None,
        actual_prep_time: str | None = None,
    ) -> TicketItem:
        item = self.find_item(line_item_id)
        item.status = status
        item.started_at = _parse_timestamp(started_at)
        item.ready_at = _parse_timestamp(ready_at)
        item.actual_prep_time = actual_prep_time
        self._touch()
        return item

    def replace_items(self, kind: str, items: list[dict]) -> None:
        """Rebuild the items of one kind from snapshots."""
        for item in self._of_kind(kind):
            self.remove_ticket_items(item)
        for snapshot in items:
            self.add_ticket_items(TicketItem.from_snapshot(snapshot))
        self._touch()

    def change_status(self, status: str) -> None:
        self.status = status
        self._touch()

    def move_to_table(self, table_number: str | None) -> None:
        self.table_number = table_number
        self._touch()

    def update_header(self, customer_name: str | None = None, priority: str | None = None) -> None:
        if customer_name is not None:
            self.customer_name = customer_name
        if priority is not None:
            self.priority = priority
        self._touch()
