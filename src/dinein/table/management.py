"""Table administration — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.table.table import Table, TableStatus, parse_table_status


@dinein.command(part_of="Table")
class RegisterTable:
    table_number = String(required=True, max_length=50)
    capacity = Integer(min_value=1)
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command(part_of="Table")
class SetTableStatus:
    table_number = String(required=True, max_length=50)
    status = String(required=True, max_length=20)
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command_handler(part_of=Table)
class TableManagementHandler:
    @handle(RegisterTable)
    def register_table(self, command):
        repo = current_domain.repository_for(Table)
        if repo.find_by_table_number(command.table_number) is not None:
            raise ValidationError({"table_number": [f"Table {command.table_number} is already registered"]})

        table = Table.register(command.table_number, capacity=command.capacity)
        repo.add(table)

        record_audit(
            "table.registered",
            table.id,
            after={"table_number": table.table_number, "capacity": table.capacity, "status": table.status},
            actor_id=command.actor_id,
            actor_role=command.actor_role,
            entity_type="Table",
        )
        return str(table.id)

    @handle(SetTableStatus)
    def set_table_status(self, command):
        repo = current_domain.repository_for(Table)
        table = repo.find_by_table_number(command.table_number)
        if table is None:
            raise ObjectNotFoundError({"table_number": [f"Table {command.table_number} not found"]})

        previous_status = table.status
        target = parse_table_status(command.status)
        if target == TableStatus.OCCUPIED:
            table.occupy(order_id=table.current_order_id)
        else:
            table.release(target, order_id=table.current_order_id)
        repo.add(table)

        record_audit(
            "table.status_set",
            table.id,
            before={"status": previous_status},
            after={"status": table.status},
            actor_id=command.actor_id,
            actor_role=command.actor_role,
            entity_type="Table",
        )
