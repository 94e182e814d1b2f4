"""Order aggregate (CQRS) — the system of record for a dine-in order.

The order owns its line items and every monetary figure derived from them.
Items and extra items live in one ``line_items`` collection, told apart by
``kind`` and ordered by ``position`` within each kind. Every mutation that
touches items re-prices the whole order from scratch through the pricing
engine, so totals never drift.

Order status is a flat enum and may be assigned directly. The only automatic
transition is the promotion to READY once every item and extra item has been
SERVED. A PAID order accepts no further status transitions, item changes,
discounts or payments.

Side effects on the kitchen ticket and the table are never performed here:
the aggregate raises events and the ticket synchronizer / table coordinator
apply them after the order is saved.
"""

import json
import random
import string
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from dinein.domain import dinein
from dinein.order.events import (
    BookingLinked,
    DiscountApplied,
    ItemsAdded,
    ItemStatusChanged,
    OrderCreated,
    OrderDetailsUpdated,
    OrderItemsReplaced,
    OrderStatusChanged,
    PaymentRecorded,
    TableTransferred,
)
from dinein.order.preparation import ItemStatus, all_served, apply_status
from dinein.pricing.engine import PricedLineItem, compute_totals
from dinein.table.table import TableStatus, parse_table_status


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    ORDER_ACCEPTED = "ORDER_ACCEPTED"
    PREPARING = "PREPARING"
    READY = "READY"
    SERVED = "SERVED"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"
    PAID = "PAID"


class OrderPriority(Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class PaymentMethod(Enum):
    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"
    ONLINE = "ONLINE"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class LineItemKind(Enum):
    ITEM = "item"
    EXTRA = "extra"


# Orders in these states no longer hold their table
TERMINAL_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.CANCELLED})

# Fields UpdateOrderDetails may change; nothing that affects pricing
EDITABLE_DETAIL_FIELDS = (
    "customer_name",
    "customer_phone",
    "guest_count",
    "staff_name",
    "notes",
    "priority",
)

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now: datetime | None = None) -> str:
    """``ORD-<epoch millis>-<4 random uppercase alphanumerics>``."""
    now = now or datetime.now(UTC)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(random.choices(_ORDER_SUFFIX_ALPHABET, k=4))
    return f"ORD-{millis}-{suffix}"


def parse_order_status(status) -> OrderStatus:
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status: {status}"]}) from None


def parse_kind(kind) -> LineItemKind:
    if isinstance(kind, LineItemKind):
        return kind
    try:
        return LineItemKind(kind)
    except ValueError:
        raise ValidationError({"kind": [f"Unknown line item kind: {kind}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dinein.value_object(part_of="Order")
class SelectedVariation:
    """The variation chosen for a line item, as priced when it was ordered."""

    variation_id = Identifier()
    name = String(max_length=255)
    price = Float(min_value=0.0)


@dinein.value_object(part_of="Order")
class Discount:
    """A percentage or fixed discount.

    ``amount`` is the discount actually applied, derived on every re-pricing
    from ``percentage`` or from the requested ``fixed_amount`` capped at the
    subtotal.
    """

    percentage = Float(min_value=0.0, max_value=100.0)
    fixed_amount = Float(min_value=0.0)
    amount = Float(default=0.0, min_value=0.0)
    reason = String(max_length=500, default="")
    approved_by = Identifier()


@dinein.value_object(part_of="Order")
class PaymentDetails:
    method = String(max_length=20, choices=PaymentMethod)
    amount = Float(min_value=0.0)
    transaction_id = String(max_length=255)
    loyalty_points_used = Integer(default=0, min_value=0)
    paid_at = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@dinein.entity(part_of="Order")
class LineItem:
    """One ordered menu entry.

    ``name`` and ``base_price`` are snapshots taken when the item was ordered;
    later catalog changes never reach them.
    """

    kind = String(max_length=10, choices=LineItemKind, default=LineItemKind.ITEM.value)
    position = Integer(required=True, min_value=0)
    menu_item_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    base_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    variation = ValueObject(SelectedVariation)
    addons = Text(default="[]")  # JSON: list of {addon_id, name, price}
    item_total = Float(required=True, min_value=0.0)
    status = String(max_length=20, choices=ItemStatus, default=ItemStatus.PENDING.value)
    time_to_prepare = Integer(default=15, min_value=1)
    special_instructions = String(max_length=500)
    started_at = DateTime()
    ready_at = DateTime()
    actual_prep_time = String(max_length=20)

    def snapshot(self) -> dict:
        """Kitchen-relevant view of the item, safe to put on an event."""
        return {
            "line_item_id": str(self.id),
            "kind": self.kind,
            "position": self.position,
            "menu_item_id": str(self.menu_item_id),
            "name": self.name,
            "quantity": self.quantity,
            "variation": (
                {
                    "variation_id": str(self.variation.variation_id) if self.variation.variation_id else None,
                    "name": self.variation.name,
                    "price": self.variation.price,
                }
                if self.variation
                else None
            ),
            "addons": json.loads(self.addons) if self.addons else [],
            "status": self.status,
            "time_to_prepare": self.time_to_prepare,
            "special_instructions": self.special_instructions,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ready_at": self.ready_at.isoformat() if self.ready_at else None,
            "actual_prep_time": self.actual_prep_time,
        }


def _line_item_from_priced(priced: PricedLineItem, kind: LineItemKind, position: int) -> LineItem:
    variation = None
    if priced.variation:
        variation = SelectedVariation(
            variation_id=priced.variation["variation_id"],
            name=priced.variation["name"],
            price=priced.variation["price"],
        )
    return LineItem(
        kind=kind.value,
        position=position,
        menu_item_id=priced.menu_item_id,
        name=priced.name,
        base_price=priced.base_price,
        quantity=priced.quantity,
        variation=variation,
        addons=json.dumps(priced.addons),
        item_total=priced.item_total,
        status=ItemStatus.PENDING.value,
        time_to_prepare=priced.time_to_prepare,
        special_instructions=priced.special_instructions,
    )


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@dinein.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    line_items = HasMany(LineItem)

    # Pricing
    subtotal = Float(default=0.0, min_value=0.0)
    discount = ValueObject(Discount)
    sgst_rate = Float(default=2.5, min_value=0.0)
    cgst_rate = Float(default=2.5, min_value=0.0)
    sgst = Float(default=0.0, min_value=0.0)
    cgst = Float(default=0.0, min_value=0.0)
    gst = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)

    # Lifecycle
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.PENDING.value)
    priority = String(max_length=10, choices=OrderPriority, default=OrderPriority.NORMAL.value)

    # Customer
    customer_name = String(max_length=255, default="Guest")
    customer_phone = String(max_length=30, default="")
    guest_count = Integer(min_value=1)
    staff_name = String(max_length=255)
    notes = Text(default="")

    # Table
    table_id = Identifier()
    table_number = String(max_length=50)

    # Booking linkage
    booking_id = Identifier()
    grc_no = String(max_length=100)
    room_number = String(max_length=100)
    guest_name = String(max_length=255)
    guest_phone = String(max_length=30)

    # Payment
    payment = ValueObject(PaymentDetails)
    payment_status = String(max_length=10, choices=PaymentStatus, default=PaymentStatus.UNPAID.value)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        priced_items: list[PricedLineItem],
        table_number: str | None = None,
        table_id: str | None = None,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        guest_count: int | None = None,
        staff_name: str | None = None,
        notes: str | None = None,
        discount_percentage: float | None = None,
        discount_reason: str | None = None,
        sgst_rate: float | None = None,
        cgst_rate: float | None = None,
    ):
        """Create a PENDING order from already-priced items.

        Args:
            priced_items: Output of the pricing engine, at least one.
            table_number: Human-readable table the order is seated at.
            discount_percentage: Optional discount applied from the start.
            sgst_rate / cgst_rate: Per-order tax overrides (None = default).
        """
        if not priced_items:
            raise ValidationError({"items": ["At least one item is required"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=generate_order_number(now),
            status=OrderStatus.PENDING.value,
            priority=OrderPriority.NORMAL.value,
            customer_name=customer_name or staff_name or "Guest",
            customer_phone=customer_phone or "",
            guest_count=guest_count,
            staff_name=staff_name,
            notes=notes or "",
            table_id=table_id,
            table_number=str(table_number) if table_number else None,
            sgst_rate=2.5 if sgst_rate is None else sgst_rate,
            cgst_rate=2.5 if cgst_rate is None else cgst_rate,
            payment_status=PaymentStatus.UNPAID.value,
            created_at=now,
            updated_at=now,
        )
        if discount_percentage is not None:
            order.discount = Discount(percentage=discount_percentage, reason=discount_reason or "")

        for position, priced in enumerate(priced_items):
            order.add_line_items(_line_item_from_priced(priced, LineItemKind.ITEM, position))
        order._recalculate_pricing()

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order.order_number,
                table_id=str(table_id) if table_id else None,
                table_number=order.table_number,
                customer_name=order.customer_name,
                status=order.status,
                priority=order.priority,
                items=json.dumps([item.snapshot() for item in order.items]),
                subtotal=order.subtotal,
                total_amount=order.total_amount,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Collection views
    # -------------------------------------------------------------------
    def _of_kind(self, kind: LineItemKind) -> list[LineItem]:
        return sorted(
            (item for item in (self.line_items or []) if item.kind == kind.value),
            key=lambda item: item.position,
        )

    @property
    def items(self) -> list[LineItem]:
        return self._of_kind(LineItemKind.ITEM)

    @property
    def extra_items(self) -> list[LineItem]:
        return self._of_kind(LineItemKind.EXTRA)

    def find_line_item(self, kind, line_item_id=None, index=None) -> LineItem:
        """Locate an item by stable id or by position within its collection."""
        kind = parse_kind(kind)
        collection = self._of_kind(kind)
        label = "Extra item" if kind == LineItemKind.EXTRA else "Item"

        if line_item_id is not None:
            item = next((i for i in collection if str(i.id) == str(line_item_id)), None)
            if item is None:
                raise ObjectNotFoundError({"line_item_id": [f"{label} {line_item_id} not found"]})
            return item

        if index is None:
            raise ValidationError({"line_item_id": ["Either line_item_id or index is required"]})
        if not 0 <= index < len(collection):
            raise ObjectNotFoundError({"index": [f"{label} at index {index} not found"]})
        return collection[index]

    # -------------------------------------------------------------------
    # Guards and pricing
    # -------------------------------------------------------------------
    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID.value

    def assert_not_paid(self) -> None:
        if self.is_paid:
            raise ValidationError({"status": [f"Order {self.order_number} is paid and can no longer change"]})

    def _recalculate_pricing(self) -> None:
        """Re-derive every money field from the current line items."""
        percentage = self.discount.percentage if self.discount else None
        fixed_amount = self.discount.fixed_amount if self.discount and percentage is None else None

        summary = compute_totals(
            [item.item_total for item in (self.line_items or [])],
            discount_percentage=percentage,
            discount_amount=fixed_amount,
            sgst_rate=self.sgst_rate,
            cgst_rate=self.cgst_rate,
        )
        self.subtotal = summary.subtotal
        self.total_amount = summary.total_amount
        self.sgst = summary.sgst
        self.cgst = summary.cgst
        self.gst = summary.gst
        if self.discount:
            self.discount = Discount(
                percentage=self.discount.percentage,
                fixed_amount=self.discount.fixed_amount,
                amount=summary.discount_amount,
                reason=self.discount.reason,
                approved_by=self.discount.approved_by,
            )

    # -------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------
    def append_items(self, priced_items: list[PricedLineItem], kind=LineItemKind.ITEM) -> list[LineItem]:
        """Append priced items to the items or extra items collection."""
        self.assert_not_paid()
        kind = parse_kind(kind)
        if not priced_items:
            raise ValidationError({"items": ["At least one item is required"]})

        next_position = len(self._of_kind(kind))
        added = []
        for offset, priced in enumerate(priced_items):
            item = _line_item_from_priced(priced, kind, next_position + offset)
            self.add_line_items(item)
            added.append(item)

        self._recalculate_pricing()
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ItemsAdded(
                order_id=str(self.id),
                kind=kind.value,
                items=json.dumps([item.snapshot() for item in added]),
                subtotal=self.subtotal,
                total_amount=self.total_amount,
                added_at=now,
            )
        )
        return added

    def replace_items(self, priced_items: list[PricedLineItem]) -> None:
        """Replace the main item list (extra items stay) and re-price."""
        self.assert_not_paid()
        if not priced_items:
            raise ValidationError({"items": ["At least one item is required"]})

        for item in self.items:
            self.remove_line_items(item)
        for position, priced in enumerate(priced_items):
            self.add_line_items(_line_item_from_priced(priced, LineItemKind.ITEM, position))

        self._recalculate_pricing()
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderItemsReplaced(
                order_id=str(self.id),
                items=json.dumps([item.snapshot() for item in self.items]),
                subtotal=self.subtotal,
                total_amount=self.total_amount,
                replaced_at=now,
            )
        )

    def update_line_item_status(
        self,
        kind,
        status,
        line_item_id=None,
        index=None,
        now: datetime | None = None,
    ) -> LineItem:
        """Move one item or extra item into ``status``.

        Entering SERVED promotes the order to READY once every item in both
        collections is SERVED.
        """
        self.assert_not_paid()
        item = self.find_line_item(kind, line_item_id=line_item_id, index=index)
        now = now or datetime.now(UTC)
        entered = apply_status(item, status, now)
        self.updated_at = now

        self.raise_(
            ItemStatusChanged(
                order_id=str(self.id),
                line_item_id=str(item.id),
                kind=item.kind,
                position=item.position,
                status=item.status,
                started_at=item.started_at,
                ready_at=item.ready_at,
                actual_prep_time=item.actual_prep_time,
                changed_at=now,
            )
        )

        if (
            entered == ItemStatus.SERVED
            and all_served(self.line_items or [])
            and self.status != OrderStatus.READY.value
        ):
            self._set_status(OrderStatus.READY, reason="all_items_served", now=now)
        return item

    # -------------------------------------------------------------------
    # Order status
    # -------------------------------------------------------------------
    def _set_status(self, target: OrderStatus, reason: str, now: datetime) -> None:
        previous = self.status
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                status=target.value,
                table_number=self.table_number,
                reason=reason,
                changed_at=now,
            )
        )

    def change_status(self, status) -> None:
        """Assign the order status directly. No transition graph is enforced."""
        self.assert_not_paid()
        target = parse_order_status(status)
        self._set_status(target, reason="manual", now=datetime.now(UTC))
        if target == OrderStatus.PAID:
            self.payment_status = PaymentStatus.PAID.value

    # -------------------------------------------------------------------
    # Discount and payment
    # -------------------------------------------------------------------
    def apply_discount(
        self,
        percentage: float | None = None,
        amount: float | None = None,
        reason: str | None = None,
        approved_by: str | None = None,
    ) -> None:
        """Set a percentage or fixed discount and re-price the order."""
        self.assert_not_paid()
        if percentage is None and amount is None:
            raise ValidationError({"discount": ["Either a percentage or an amount is required"]})
        if percentage is not None and not 0 <= percentage <= 100:
            raise ValidationError({"discount_percentage": ["Discount percentage must be between 0 and 100"]})
        if amount is not None and amount < 0:
            raise ValidationError({"discount_amount": ["Discount amount cannot be negative"]})

        self.discount = Discount(
            percentage=percentage,
            fixed_amount=None if percentage is not None else amount,
            reason=reason or "",
            approved_by=approved_by,
        )
        self._recalculate_pricing()
        self.updated_at = datetime.now(UTC)

        self.raise_(
            DiscountApplied(
                order_id=str(self.id),
                percentage=percentage,
                amount=self.discount.amount,
                reason=self.discount.reason,
                approved_by=approved_by,
                subtotal=self.subtotal,
                total_amount=self.total_amount,
                gst=self.gst,
            )
        )

    @property
    def has_discount(self) -> bool:
        return bool(self.discount and (self.discount.percentage is not None or self.discount.fixed_amount))

    def record_payment(
        self,
        method=PaymentMethod.CASH.value,
        amount: float | None = None,
        transaction_id: str | None = None,
        loyalty_points_used: int | None = None,
        discount_percentage: float | None = None,
    ) -> None:
        """Book a payment and mark the order PAID.

        A ``discount_percentage`` is applied first, but only when the order has
        no discount yet. ``amount`` defaults to the (discounted) total.
        """
        self.assert_not_paid()
        try:
            method = PaymentMethod(method or PaymentMethod.CASH.value).value
        except ValueError:
            raise ValidationError({"method": [f"Unknown payment method: {method}"]}) from None
        if amount is not None and amount < 0:
            raise ValidationError({"amount": ["Payment amount cannot be negative"]})

        if discount_percentage and not self.has_discount:
            self.apply_discount(percentage=discount_percentage)

        now = datetime.now(UTC)
        paid_amount = self.total_amount if amount is None else amount
        self.payment = PaymentDetails(
            method=method,
            amount=paid_amount,
            transaction_id=transaction_id,
            loyalty_points_used=loyalty_points_used or 0,
            paid_at=now,
        )
        self.status = OrderStatus.PAID.value
        self.payment_status = PaymentStatus.PAID.value
        self.updated_at = now

        self.raise_(
            PaymentRecorded(
                order_id=str(self.id),
                order_number=self.order_number,
                table_number=self.table_number,
                method=method,
                amount=paid_amount,
                transaction_id=transaction_id,
                loyalty_points_used=loyalty_points_used or 0,
                total_amount=self.total_amount,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Table
    # -------------------------------------------------------------------
    def transfer_table(
        self,
        new_table_number: str,
        new_table_id: str | None = None,
        old_table_status=TableStatus.AVAILABLE,
    ) -> None:
        """Move the order to another table; the old one is left in ``old_table_status``."""
        self.assert_not_paid()
        if not new_table_number:
            raise ValidationError({"new_table_number": ["A destination table is required"]})
        old_status = parse_table_status(old_table_status or TableStatus.AVAILABLE)

        previous_table_number = self.table_number
        self.table_number = str(new_table_number)
        self.table_id = new_table_id
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            TableTransferred(
                order_id=str(self.id),
                previous_table_number=previous_table_number,
                previous_table_status=old_status.value,
                new_table_id=str(new_table_id) if new_table_id else None,
                new_table_number=self.table_number,
                transferred_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Details and booking
    # -------------------------------------------------------------------
    def update_details(self, **changes) -> dict:
        """Change non-pricing details. Unknown fields are rejected."""
        self.assert_not_paid()
        unknown = sorted(set(changes) - set(EDITABLE_DETAIL_FIELDS))
        if unknown:
            raise ValidationError({"fields": [f"Fields cannot be updated: {', '.join(unknown)}"]})

        applied = {field: value for field, value in changes.items() if value is not None}
        if "priority" in applied:
            try:
                applied["priority"] = OrderPriority(applied["priority"]).value
            except ValueError:
                raise ValidationError({"priority": [f"Unknown priority: {applied['priority']}"]}) from None
        if not applied:
            return {}

        for field, value in applied.items():
            setattr(self, field, value)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderDetailsUpdated(
                order_id=str(self.id),
                changes=json.dumps(applied),
                priority=self.priority,
                customer_name=self.customer_name,
                updated_at=now,
            )
        )
        return applied

    def link_booking(
        self,
        booking_id: str,
        grc_no: str | None = None,
        room_number: str | None = None,
        guest_name: str | None = None,
        guest_phone: str | None = None,
    ) -> None:
        self.booking_id = booking_id
        self.grc_no = grc_no
        self.room_number = room_number
        self.guest_name = guest_name
        self.guest_phone = guest_phone
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            BookingLinked(
                order_id=str(self.id),
                booking_id=str(booking_id),
                grc_no=grc_no,
                room_number=room_number,
                linked_at=now,
            )
        )

    def to_detail(self) -> dict:
        """Full read model of the order for the detail endpoint."""
        return {
            "order_id": str(self.id),
            "order_number": self.order_number,
            "status": self.status,
            "priority": self.priority,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "guest_count": self.guest_count,
            "staff_name": self.staff_name,
            "notes": self.notes,
            "table_id": str(self.table_id) if self.table_id else None,
            "table_number": self.table_number,
            "items": [
                dict(item.snapshot(), item_total=item.item_total, base_price=item.base_price)
                for item in self.items
            ],
            "extra_items": [
                dict(item.snapshot(), item_total=item.item_total, base_price=item.base_price)
                for item in self.extra_items
            ],
            "subtotal": self.subtotal,
            "discount": (
                {
                    "percentage": self.discount.percentage,
                    "fixed_amount": self.discount.fixed_amount,
                    "amount": self.discount.amount,
                    "reason": self.discount.reason,
                    "approved_by": str(self.discount.approved_by) if self.discount.approved_by else None,
                }
                if self.discount
                else None
            ),
            "sgst_rate": self.sgst_rate,
            "cgst_rate": self.cgst_rate,
            "sgst": self.sgst,
            "cgst": self.cgst,
            "gst": self.gst,
            "total_amount": self.total_amount,
            "payment_status": self.payment_status,
            "payment": (
                {
                    "method": self.payment.method,
                    "amount": self.payment.amount,
                    "transaction_id": self.payment.transaction_id,
                    "loyalty_points_used": self.payment.loyalty_points_used,
                    "paid_at": self.payment.paid_at.isoformat() if self.payment.paid_at else None,
                }
                if self.payment
                else None
            ),
            "booking_id": str(self.booking_id) if self.booking_id else None,
            "grc_no": self.grc_no,
            "room_number": self.room_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
