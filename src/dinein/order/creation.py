"""Order creation — command and handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.catalog import get_catalog
from dinein.domain import dinein
from dinein.order.order import Order
from dinein.pricing.engine import (
    DEFAULT_CGST_RATE,
    DEFAULT_PREP_TIME_MINUTES,
    DEFAULT_SGST_RATE,
    parse_line_item_requests,
    resolve_line_items,
)
from dinein.table.table import Table
from dinein.utils.config import custom_setting


@dinein.command(part_of="Order")
class CreateOrder:
    """Place a new dine-in order, optionally seated at a table."""

    items = Text(required=True)  # JSON: list of line item requests
    table_number = String(max_length=50)
    table_no = String(max_length=50)  # legacy alias of table_number
    table_id = Identifier()
    customer_name = String(max_length=255)
    customer_phone = String(max_length=30)
    guest_count = Integer(min_value=1)
    staff_name = String(max_length=255)
    notes = Text()
    discount_percentage = Float(min_value=0.0, max_value=100.0)
    discount_reason = String(max_length=500)
    sgst_rate = Float(min_value=0.0)
    cgst_rate = Float(min_value=0.0)
    actor_id = Identifier()
    actor_role = String(max_length=50)


def resolve_table_reference(table_number, table_id=None):
    """Fill in whichever half of the table reference the caller left out."""
    if table_number and not table_id:
        table = current_domain.repository_for(Table).find_by_table_number(table_number)
        if table is not None:
            table_id = str(table.id)
    return table_number, table_id


def price_requested_items(raw_items):
    requests = parse_line_item_requests(raw_items)
    default_prep_time = custom_setting("DEFAULT_PREP_TIME_MINUTES", DEFAULT_PREP_TIME_MINUTES)
    return resolve_line_items(requests, get_catalog(), default_prep_time)


@dinein.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        priced_items = price_requested_items(command.items)
        table_number, table_id = resolve_table_reference(
            command.table_number or command.table_no,
            command.table_id,
        )

        order = Order.create(
            priced_items,
            table_number=table_number,
            table_id=table_id,
            customer_name=command.customer_name,
            customer_phone=command.customer_phone,
            guest_count=command.guest_count,
            staff_name=command.staff_name,
            notes=command.notes,
            discount_percentage=command.discount_percentage,
            discount_reason=command.discount_reason,
            sgst_rate=(
                command.sgst_rate
                if command.sgst_rate is not None
                else custom_setting("DEFAULT_SGST_RATE", DEFAULT_SGST_RATE)
            ),
            cgst_rate=(
                command.cgst_rate
                if command.cgst_rate is not None
                else custom_setting("DEFAULT_CGST_RATE", DEFAULT_CGST_RATE)
            ),
        )
        current_domain.repository_for(Order).add(order)

        record_audit(
            "order.created",
            order.id,
            after=order.to_detail(),
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
        return str(order.id)
