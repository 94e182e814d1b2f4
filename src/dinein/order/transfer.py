"""Table transfer — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.order.creation import resolve_table_reference
from dinein.order.order import Order
from dinein.table.table import TableStatus


@dinein.command(part_of="Order")
class TransferTable:
    order_id = Identifier(required=True)
    new_table_number = String(required=True, max_length=50)
    new_table_id = Identifier()
    old_table_status = String(max_length=20, default=TableStatus.AVAILABLE.value)
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command_handler(part_of=Order)
class TransferTableHandler:
    @handle(TransferTable)
    def transfer_table(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        before = {"table_number": order.table_number, "table_id": str(order.table_id) if order.table_id else None}

        new_table_number, new_table_id = resolve_table_reference(command.new_table_number, command.new_table_id)
        order.transfer_table(
            new_table_number,
            new_table_id=new_table_id,
            old_table_status=command.old_table_status,
        )
        repo.add(order)

        record_audit(
            "order.table_transferred",
            order.id,
            before=before,
            after={"table_number": order.table_number, "table_id": str(order.table_id) if order.table_id else None},
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
