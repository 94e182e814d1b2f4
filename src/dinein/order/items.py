"""Order item additions — commands and handler.

New items and extra items are priced through the pricing engine and
appended; the order is then re-priced from its complete item list.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.order.creation import price_requested_items
from dinein.order.order import LineItemKind, Order


@dinein.command(part_of="Order")
class AddItems:
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item requests
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command(part_of="Order")
class AddExtraItems:
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item requests
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command_handler(part_of=Order)
class AddOrderItemsHandler:
    def _append(self, command, kind: LineItemKind, action: str):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assert_not_paid()
        before = order.to_detail()

        priced_items = price_requested_items(command.items)
        added = order.append_items(priced_items, kind=kind)
        repo.add(order)

        record_audit(
            action,
            order.id,
            before=before,
            after=order.to_detail(),
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
        return [str(item.id) for item in added]

    @handle(AddItems)
    def add_items(self, command):
        return self._append(command, LineItemKind.ITEM, "order.items_added")

    @handle(AddExtraItems)
    def add_extra_items(self, command):
        return self._append(command, LineItemKind.EXTRA, "order.extra_items_added")
