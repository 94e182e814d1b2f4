"""Domain events for the Order aggregate.

Each event is a self-contained, idempotent intent: applying it twice to the
kitchen ticket or the table leaves them in the same state as applying it
once. The ticket synchronizer and table coordinator consume these events, and
reconciliation can replay the order's current state in the same shape.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from dinein.domain import dinein


@dinein.event(part_of="Order")
class OrderCreated:
    """A dine-in order was placed and priced."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    table_id = Identifier()
    table_number = String()
    customer_name = String()
    status = String(required=True)
    priority = String(required=True)
    items = Text(required=True)  # JSON: list of line item snapshots
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    created_at = DateTime(required=True)


@dinein.event(part_of="Order")
class ItemsAdded:
    """Items or extra items were appended to an order."""

    __version__ = 1

    order_id = Identifier(required=True)
    kind = String(required=True)  # "item" or "extra"
    items = Text(required=True)  # JSON: list of line item snapshots
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    added_at = DateTime(required=True)


@dinein.event(part_of="Order")
class ItemStatusChanged:
    """A single line item entered a preparation status."""

    __version__ = 1

    order_id = Identifier(required=True)
    line_item_id = Identifier(required=True)
    kind = String(required=True)
    position = Integer(required=True)
    status = String(required=True)
    started_at = DateTime()
    ready_at = DateTime()
    actual_prep_time = String()
    changed_at = DateTime(required=True)


@dinein.event(part_of="Order")
class OrderStatusChanged:
    """The order-level status was set, directly or by auto-promotion."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    table_number = String()
    reason = String()  # "manual" or "all_items_served"
    changed_at = DateTime(required=True)


@dinein.event(part_of="Order")
class DiscountApplied:
    """A discount was set and the order re-priced."""

    __version__ = 1

    order_id = Identifier(required=True)
    percentage = Float()
    amount = Float(required=True)
    reason = String()
    approved_by = Identifier()
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    gst = Float(required=True)


@dinein.event(part_of="Order")
class PaymentRecorded:
    """Payment was booked against the order; it is now PAID."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    table_number = String()
    method = String(required=True)
    amount = Float(required=True)
    transaction_id = String()
    loyalty_points_used = Integer(default=0)
    total_amount = Float(required=True)
    paid_at = DateTime(required=True)


@dinein.event(part_of="Order")
class TableTransferred:
    """The order moved from one table to another."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_table_number = String()
    previous_table_status = String(required=True)
    new_table_id = Identifier()
    new_table_number = String(required=True)
    transferred_at = DateTime(required=True)


@dinein.event(part_of="Order")
class OrderDetailsUpdated:
    """Non-pricing order details (customer, notes, priority...) changed."""

    __version__ = 1

    order_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: {field: new value}
    priority = String()
    customer_name = String()
    updated_at = DateTime(required=True)


@dinein.event(part_of="Order")
class OrderItemsReplaced:
    """The order's main item list was replaced and re-priced."""

    __version__ = 1

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item snapshots
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    replaced_at = DateTime(required=True)


@dinein.event(part_of="Order")
class BookingLinked:
    """Booking metadata was backfilled onto the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    booking_id = Identifier(required=True)
    grc_no = String()
    room_number = String()
    linked_at = DateTime(required=True)
