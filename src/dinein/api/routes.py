"""FastAPI routes for the Dine-in domain."""

import json

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from protean.utils.globals import current_domain

from dinein.api.schemas import (
    AddItemsRequest,
    CreateOrderRequest,
    DiscountRequest,
    ItemStatusRequest,
    LinkBookingsResponse,
    OrderIdResponse,
    OrderStatusRequest,
    PaymentRequest,
    RegisterTableRequest,
    StatusResponse,
    TableIdResponse,
    TableStatusRequest,
    TransferTableRequest,
    UpdateDetailsRequest,
)
from dinein.booking.linking import LinkOrdersToBookings
from dinein.exceptions import QueryTimeoutError
from dinein.order.creation import CreateOrder
from dinein.order.details import UpdateOrderDetails
from dinein.order.items import AddExtraItems, AddItems
from dinein.order.payment import ApplyDiscount, RecordPayment
from dinein.order.queries import get_order, list_orders
from dinein.order.reconciliation import ReconcileOrder
from dinein.order.status import UpdateExtraItemStatus, UpdateItemStatus, UpdateOrderStatus
from dinein.order.transfer import TransferTable
from dinein.table.management import RegisterTable, SetTableStatus
from dinein.table.table import Table


def _items_json(items) -> str:
    return json.dumps([item.model_dump() for item in items])


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    """Place a new dine-in order."""
    command = CreateOrder(
        items=_items_json(body.items),
        table_number=body.table_number,
        table_no=body.table_no,
        table_id=body.table_id,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        guest_count=body.guest_count,
        staff_name=body.staff_name,
        notes=body.notes,
        discount_percentage=body.discount_percentage,
        discount_reason=body.discount_reason,
        sgst_rate=body.sgst_rate,
        cgst_rate=body.cgst_rate,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("")
async def get_orders(status: str | None = None, table_number: str | None = None, limit: int | None = None):
    """List orders, newest first."""
    return list_orders(status=status, table_number=table_number, limit=limit)


@order_router.get("/{order_id}")
async def get_order_detail(order_id: str):
    return get_order(order_id)


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: OrderStatusRequest) -> StatusResponse:
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return StatusResponse(status=body.status)


@order_router.put("/{order_id}/items/status", response_model=StatusResponse)
async def update_item_status(order_id: str, body: ItemStatusRequest) -> StatusResponse:
    command = UpdateItemStatus(
        order_id=order_id,
        status=body.status,
        line_item_id=body.line_item_id,
        index=body.index,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)


@order_router.put("/{order_id}/extra-items/status", response_model=StatusResponse)
async def update_extra_item_status(order_id: str, body: ItemStatusRequest) -> StatusResponse:
    command = UpdateExtraItemStatus(
        order_id=order_id,
        status=body.status,
        line_item_id=body.line_item_id,
        index=body.index,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=body.status)


@order_router.post("/{order_id}/items", response_model=StatusResponse)
async def add_items(order_id: str, body: AddItemsRequest) -> StatusResponse:
    current_domain.process(AddItems(order_id=order_id, items=_items_json(body.items)), asynchronous=False)
    return StatusResponse(status="items_added")


@order_router.post("/{order_id}/extra-items", response_model=StatusResponse)
async def add_extra_items(order_id: str, body: AddItemsRequest) -> StatusResponse:
    current_domain.process(AddExtraItems(order_id=order_id, items=_items_json(body.items)), asynchronous=False)
    return StatusResponse(status="extra_items_added")


@order_router.put("/{order_id}/discount", response_model=StatusResponse)
async def apply_discount(order_id: str, body: DiscountRequest) -> StatusResponse:
    command = ApplyDiscount(
        order_id=order_id,
        percentage=body.percentage,
        amount=body.amount,
        reason=body.reason,
        approved_by=body.approved_by,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="discount_applied")


@order_router.post("/{order_id}/payment", response_model=StatusResponse)
async def process_payment(order_id: str, body: PaymentRequest) -> StatusResponse:
    """Record payment; the order becomes PAID and its table is released."""
    command = RecordPayment(
        order_id=order_id,
        method=body.method,
        amount=body.amount,
        transaction_id=body.transaction_id,
        loyalty_points_used=body.loyalty_points_used,
        discount_percentage=body.discount_percentage,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="paid")


@order_router.put("/{order_id}/transfer", response_model=StatusResponse)
async def transfer_table(order_id: str, body: TransferTableRequest) -> StatusResponse:
    command = TransferTable(
        order_id=order_id,
        new_table_number=body.new_table_number,
        new_table_id=body.new_table_id,
        old_table_status=body.old_table_status,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="transferred")


@order_router.patch("/{order_id}", response_model=StatusResponse)
async def update_order_details(order_id: str, body: UpdateDetailsRequest) -> StatusResponse:
    command = UpdateOrderDetails(
        order_id=order_id,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        guest_count=body.guest_count,
        staff_name=body.staff_name,
        notes=body.notes,
        priority=body.priority,
        items=_items_json(body.items) if body.items is not None else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="updated")


@order_router.post("/{order_id}/reconcile", response_model=StatusResponse)
async def reconcile_order(order_id: str) -> StatusResponse:
    """Replay the order's state into its kitchen ticket and table."""
    current_domain.process(ReconcileOrder(order_id=order_id), asynchronous=False)
    return StatusResponse(status="reconciled")


@order_router.post("/link-bookings", response_model=LinkBookingsResponse)
async def link_bookings() -> LinkBookingsResponse:
    result = current_domain.process(LinkOrdersToBookings(), asynchronous=False)
    return LinkBookingsResponse(
        message=f"Linked {result['linked_count']} restaurant orders to bookings",
        linked_count=result["linked_count"],
        total_unlinked=result["total_unlinked"],
    )


# ---------------------------------------------------------------------------
# Table Router
# ---------------------------------------------------------------------------
table_router = APIRouter(prefix="/tables", tags=["tables"])


@table_router.post("", status_code=201, response_model=TableIdResponse)
async def register_table(body: RegisterTableRequest) -> TableIdResponse:
    result = current_domain.process(
        RegisterTable(table_number=body.table_number, capacity=body.capacity),
        asynchronous=False,
    )
    return TableIdResponse(table_id=result)


@table_router.get("")
async def get_tables():
    tables = current_domain.repository_for(Table)._dao.query.all().items
    return [
        {
            "table_id": str(table.id),
            "table_number": table.table_number,
            "status": table.status,
            "capacity": table.capacity,
            "current_order_id": str(table.current_order_id) if table.current_order_id else None,
        }
        for table in sorted(tables, key=lambda t: t.table_number)
    ]


@table_router.put("/{table_number}/status", response_model=StatusResponse)
async def set_table_status(table_number: str, body: TableStatusRequest) -> StatusResponse:
    current_domain.process(SetTableStatus(table_number=table_number, status=body.status), asynchronous=False)
    return StatusResponse(status=body.status)


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
async def _query_timeout_handler(request: Request, exc: QueryTimeoutError) -> JSONResponse:
    return JSONResponse(status_code=408, content={"error": exc.messages})


def register_dinein_exception_handlers(app: FastAPI) -> None:
    """Map Protean errors to 400/404 and query timeouts to 408."""
    register_exception_handlers(app)
    app.add_exception_handler(QueryTimeoutError, _query_timeout_handler)
