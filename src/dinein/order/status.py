"""Item and order status — commands and handler.

Items are addressed by their stable ``line_item_id``. ``index`` is accepted
for callers that only know a position in the list and is translated to the
item's id before anything changes.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.order.order import LineItemKind, Order


@dinein.command(part_of="Order")
class UpdateItemStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    line_item_id = Identifier()
    index = Integer()
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command(part_of="Order")
class UpdateExtraItemStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    line_item_id = Identifier()
    index = Integer()
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command_handler(part_of=Order)
class OrderStatusHandler:
    def _update_line_item(self, command, kind: LineItemKind, action: str):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assert_not_paid()

        # Translate positional addressing to the stable id up front
        item = order.find_line_item(kind, line_item_id=command.line_item_id, index=command.index)
        before = item.snapshot()

        item = order.update_line_item_status(kind, command.status, line_item_id=item.id)
        repo.add(order)

        record_audit(
            action,
            order.id,
            before=before,
            after=dict(item.snapshot(), order_status=order.status),
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
        return str(item.id)

    @handle(UpdateItemStatus)
    def update_item_status(self, command):
        return self._update_line_item(command, LineItemKind.ITEM, "order.item_status_updated")

    @handle(UpdateExtraItemStatus)
    def update_extra_item_status(self, command):
        return self._update_line_item(command, LineItemKind.EXTRA, "order.extra_item_status_updated")

    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status

        order.change_status(command.status)
        repo.add(order)

        record_audit(
            "order.status_updated",
            order.id,
            before={"status": previous_status},
            after={"status": order.status},
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
