"""Pydantic API schemas for the Dine-in domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class AddonRequest(BaseModel):
    addon_id: str


class LineItemRequest(BaseModel):
    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    variation_id: str | None = None
    addons: list[AddonRequest] = []
    name: str | None = None
    time_to_prepare: int | None = Field(default=None, ge=1)
    special_instructions: str | None = None


class CreateOrderRequest(BaseModel):
    items: list[LineItemRequest]
    table_number: str | None = None
    table_no: str | None = None
    table_id: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    guest_count: int | None = None
    staff_name: str | None = None
    notes: str | None = None
    discount_percentage: float | None = None
    discount_reason: str | None = None
    sgst_rate: float | None = None
    cgst_rate: float | None = None


class AddItemsRequest(BaseModel):
    items: list[LineItemRequest]


class ItemStatusRequest(BaseModel):
    status: str
    line_item_id: str | None = None
    index: int | None = None


class OrderStatusRequest(BaseModel):
    status: str


class DiscountRequest(BaseModel):
    percentage: float | None = None
    amount: float | None = None
    reason: str | None = None
    approved_by: str | None = None


class PaymentRequest(BaseModel):
    method: str | None = None
    amount: float | None = None
    transaction_id: str | None = None
    loyalty_points_used: int | None = None
    discount_percentage: float | None = None


class TransferTableRequest(BaseModel):
    new_table_number: str
    new_table_id: str | None = None
    old_table_status: str = "available"


class UpdateDetailsRequest(BaseModel):
    customer_name: str | None = None
    customer_phone: str | None = None
    guest_count: int | None = None
    staff_name: str | None = None
    notes: str | None = None
    priority: str | None = None
    items: list[LineItemRequest] | None = None


class RegisterTableRequest(BaseModel):
    table_number: str
    capacity: int | None = None


class TableStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class TableIdResponse(BaseModel):
    table_id: str


class StatusResponse(BaseModel):
    status: str


class LinkBookingsResponse(BaseModel):
    success: bool = True
    message: str
    linked_count: int
    total_unlinked: int
