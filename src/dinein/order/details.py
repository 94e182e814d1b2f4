"""Order details — command and handler.

Only a closed set of descriptive fields can be changed. A replacement item
list may accompany the change; it is priced like any other item request and
the order totals are recomputed from it.
"""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.order.creation import price_requested_items
from dinein.order.order import Order


@dinein.command(part_of="Order")
class UpdateOrderDetails:
    order_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_phone = String(max_length=30)
    guest_count = Integer(min_value=1)
    staff_name = String(max_length=255)
    notes = Text()
    priority = String(max_length=10)
    items = Text()  # JSON: replacement list of line item requests
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command_handler(part_of=Order)
class UpdateOrderDetailsHandler:
    @handle(UpdateOrderDetails)
    def update_order_details(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assert_not_paid()
        before = order.to_detail()

        # Price the replacement first so a bad catalog reference changes nothing
        priced_items = price_requested_items(command.items) if command.items else None

        order.update_details(
            customer_name=command.customer_name,
            customer_phone=command.customer_phone,
            guest_count=command.guest_count,
            staff_name=command.staff_name,
            notes=command.notes,
            priority=command.priority,
        )
        if priced_items is not None:
            order.replace_items(priced_items)
        repo.add(order)

        record_audit(
            "order.details_updated",
            order.id,
            before=before,
            after=order.to_detail(),
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
