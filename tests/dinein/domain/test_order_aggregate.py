"""Domain tests for the Order aggregate.

Covers:
- creation and order number format
- re-pricing after every item change
- item status lifecycle and automatic promotion to READY
- discounts, payment and the PAID lock
- transfer, details, item replacement and booking linkage
"""

import json
import re
from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from dinein.order.events import (
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
from dinein.order.order import Order, OrderStatus, generate_order_number
from dinein.pricing.engine import PricedLineItem


def _priced(name="Veg Thali", base_price=100.0, quantity=1, addons=None, item_total=None):
    addons = addons or []
    unit = base_price + sum(a["price"] for a in addons)
    return PricedLineItem(
        menu_item_id=f"menu-{name.lower().replace(' ', '-')}",
        name=name,
        base_price=base_price,
        quantity=quantity,
        unit_price=unit,
        item_total=unit * quantity if item_total is None else item_total,
        time_to_prepare=15,
        addons=addons,
    )


def _thali_for_two():
    return _priced(quantity=2, addons=[{"addon_id": "addon-paneer", "name": "Extra Paneer", "price": 20.0}])


def _order(**kwargs):
    order = Order.create([_thali_for_two()], table_number="5", **kwargs)
    order._events.clear()
    return order


class TestOrderNumber:
    def test_format(self):
        assert re.fullmatch(r"ORD-\d{13}-[A-Z0-9]{4}", generate_order_number())

    def test_uses_given_clock(self):
        now = datetime(2026, 1, 1, tzinfo=UTC)
        assert generate_order_number(now).startswith(f"ORD-{int(now.timestamp() * 1000)}-")


class TestCreateOrder:
    def test_pending_normal_guest(self):
        order = Order.create([_thali_for_two()], table_number="5")
        assert order.status == OrderStatus.PENDING.value
        assert order.priority == "NORMAL"
        assert order.customer_name == "Guest"
        assert order.payment_status == "unpaid"
        assert order.table_number == "5"

    def test_pricing(self):
        order = Order.create([_thali_for_two()], table_number="5")
        assert order.subtotal == 240.0
        assert order.total_amount == 240.0
        assert order.sgst == pytest.approx(6.0)
        assert order.cgst == pytest.approx(6.0)
        assert order.gst == pytest.approx(12.0)

    def test_staff_name_used_when_no_customer_name(self):
        order = Order.create([_priced()], staff_name="Ravi")
        assert order.customer_name == "Ravi"

    def test_items_get_positions_and_stable_ids(self):
        order = Order.create([_priced(), _priced(name="Sweet Lassi", base_price=40.0)])
        assert [item.position for item in order.items] == [0, 1]
        assert all(item.id for item in order.items)
        assert order.extra_items == []

    def test_initial_discount(self):
        order = Order.create([_thali_for_two()], discount_percentage=10, discount_reason="Regular")
        assert order.discount.amount == pytest.approx(24.0)
        assert order.total_amount == pytest.approx(216.0)

    def test_zero_tax_rates_respected(self):
        order = Order.create([_priced()], sgst_rate=0, cgst_rate=0)
        assert order.gst == 0.0

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError):
            Order.create([])

    def test_raises_order_created(self):
        order = Order.create([_thali_for_two()], table_number="5")
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderCreated)
        assert event.table_number == "5"
        items = json.loads(event.items)
        assert items[0]["line_item_id"] == str(order.items[0].id)
        assert items[0]["status"] == "PENDING"


class TestAppendItems:
    def test_extra_items_repriced_into_totals(self):
        order = _order()
        order.append_items([_priced(name="Sweet Lassi", base_price=40.0)], kind="extra")
        assert len(order.extra_items) == 1
        assert order.subtotal == 280.0
        assert order.sgst == pytest.approx(7.0)

    def test_items_appended_after_existing(self):
        order = _order()
        added = order.append_items([_priced(name="Butter Naan", base_price=30.0)])
        assert added[0].position == 1
        assert [item.name for item in order.items] == ["Veg Thali", "Butter Naan"]

    def test_percentage_discount_recomputed_on_new_items(self):
        order = _order(discount_percentage=10)
        order.append_items([_priced(base_price=60.0)])
        assert order.discount.amount == pytest.approx(30.0)
        assert order.total_amount == pytest.approx(270.0)

    def test_raises_items_added(self):
        order = _order()
        order.append_items([_priced()], kind="extra")
        event = order._events[-1]
        assert isinstance(event, ItemsAdded)
        assert event.kind == "extra"

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            _order().append_items([])


class TestItemStatus:
    def test_by_index(self):
        order = _order()
        item = order.update_line_item_status("item", "PREPARING", index=0)
        assert item.status == "PREPARING"
        assert item.started_at is not None

    def test_by_stable_id(self):
        order = _order()
        line_item_id = order.items[0].id
        item = order.update_line_item_status("item", "READY", line_item_id=line_item_id)
        assert item.id == line_item_id
        assert item.actual_prep_time == "1:00"

    def test_ninety_seconds_recorded(self):
        order = _order()
        start = datetime.now(UTC)
        order.update_line_item_status("item", "PREPARING", index=0, now=start)
        item = order.update_line_item_status("item", "READY", index=0, now=start + timedelta(seconds=90))
        assert item.actual_prep_time == "1:30"

    def test_index_out_of_range(self):
        with pytest.raises(ObjectNotFoundError):
            _order().update_line_item_status("item", "READY", index=3)

    def test_extra_index_out_of_range(self):
        with pytest.raises(ObjectNotFoundError):
            _order().update_line_item_status("extra", "READY", index=0)

    def test_unknown_id(self):
        with pytest.raises(ObjectNotFoundError):
            _order().update_line_item_status("item", "READY", line_item_id="nope")

    def test_raises_item_status_changed(self):
        order = _order()
        order.update_line_item_status("item", "PREPARING", index=0)
        event = order._events[-1]
        assert isinstance(event, ItemStatusChanged)
        assert event.line_item_id == str(order.items[0].id)
        assert event.status == "PREPARING"

    def test_order_ready_when_everything_served(self):
        order = _order()
        order.append_items([_priced(base_price=40.0)], kind="extra")
        order.update_line_item_status("item", "SERVED", index=0)
        assert order.status == "PENDING"

        order.update_line_item_status("extra", "SERVED", index=0)
        assert order.status == "READY"
        promoted = [e for e in order._events if isinstance(e, OrderStatusChanged)]
        assert len(promoted) == 1
        assert promoted[0].reason == "all_items_served"

    def test_single_promotion_whatever_the_serving_order(self):
        order = _order()
        order.append_items(
            [_priced(name="Butter Naan", base_price=30.0), _priced(name="Jeera Rice", base_price=60.0)]
        )
        order.append_items(
            [_priced(name="Sweet Lassi", base_price=40.0), _priced(name="Masala Chaas", base_price=30.0)],
            kind="extra",
        )
        order._events.clear()

        serving_order = [("extra", 1), ("item", 2), ("extra", 0), ("item", 0), ("item", 1)]
        for position, (kind, index) in enumerate(serving_order):
            order.update_line_item_status(kind, "SERVED", index=index)
            if position < len(serving_order) - 1:
                assert order.status == "PENDING"
        assert order.status == "READY"

        # Serving an item again after promotion does not promote twice
        order.update_line_item_status("extra", "SERVED", index=1)
        order.update_line_item_status("item", "SERVED", index=0)

        promotions = [
            e for e in order._events if isinstance(e, OrderStatusChanged) and e.reason == "all_items_served"
        ]
        assert len(promotions) == 1
        assert not [e for e in order._events if isinstance(e, OrderStatusChanged) and e is not promotions[0]]

    def test_no_promotion_when_already_ready(self):
        order = _order()
        order.change_status("READY")
        order._events.clear()
        order.update_line_item_status("item", "SERVED", index=0)
        assert not [e for e in order._events if isinstance(e, OrderStatusChanged)]


class TestOrderStatus:
    def test_direct_assignment(self):
        order = _order()
        order.change_status("SERVED")
        assert order.status == "SERVED"
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "PENDING"
        assert event.table_number == "5"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            _order().change_status("DELIVERED")


class TestDiscount:
    def test_percentage(self):
        order = _order()
        order.apply_discount(percentage=10, reason="Birthday", approved_by="mgr-1")
        assert order.discount.amount == pytest.approx(24.0)
        assert order.total_amount == pytest.approx(216.0)
        assert order.sgst == pytest.approx(5.4)
        assert isinstance(order._events[-1], DiscountApplied)

    def test_fixed_amount_capped(self):
        order = _order()
        order.apply_discount(amount=500.0)
        assert order.total_amount == 0.0

    def test_fixed_amount(self):
        order = _order()
        order.apply_discount(amount=40.0)
        assert order.total_amount == 200.0

    def test_capped_fixed_amount_recovers_when_subtotal_grows(self):
        order = Order.create([_priced(base_price=30.0)], table_number="5")
        order.apply_discount(amount=50.0)
        assert order.discount.amount == pytest.approx(30.0)
        assert order.total_amount == 0.0

        order.append_items([_priced(name="Paneer Tikka", base_price=100.0)])
        assert order.subtotal == pytest.approx(130.0)
        assert order.discount.fixed_amount == pytest.approx(50.0)
        assert order.discount.amount == pytest.approx(50.0)
        assert order.total_amount == pytest.approx(80.0)

    def test_fixed_amount_stable_across_repricings(self):
        order = _order()
        order.apply_discount(amount=40.0)
        order.append_items([_priced(name="Sweet Lassi", base_price=40.0)], kind="extra")
        order.append_items([_priced(name="Butter Naan", base_price=30.0)])
        assert order.discount.amount == pytest.approx(40.0)
        assert order.total_amount == pytest.approx(270.0)

    def test_neither_given_rejected(self):
        with pytest.raises(ValidationError):
            _order().apply_discount()

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            _order().apply_discount(percentage=120)


class TestPayment:
    def test_marks_paid_with_defaults(self):
        order = _order()
        order.record_payment()
        assert order.status == "PAID"
        assert order.payment_status == "paid"
        assert order.payment.method == "CASH"
        assert order.payment.amount == 240.0
        assert order.payment.paid_at is not None
        assert isinstance(order._events[-1], PaymentRecorded)

    def test_discount_applied_when_none_exists(self):
        order = _order()
        order.record_payment(method="UPI", discount_percentage=10)
        assert order.total_amount == pytest.approx(216.0)
        assert order.payment.amount == pytest.approx(216.0)

    def test_existing_discount_kept(self):
        order = _order()
        order.apply_discount(percentage=5)
        order.record_payment(discount_percentage=50)
        assert order.discount.percentage == 5
        assert order.total_amount == pytest.approx(228.0)

    def test_unknown_method_rejected(self):
        with pytest.raises(ValidationError):
            _order().record_payment(method="CHEQUE")


class TestPaidLock:
    @pytest.fixture()
    def paid(self):
        order = _order()
        order.record_payment()
        order._events.clear()
        return order

    def test_status_change_rejected(self, paid):
        with pytest.raises(ValidationError):
            paid.change_status("PENDING")

    def test_second_payment_rejected(self, paid):
        with pytest.raises(ValidationError):
            paid.record_payment()

    def test_items_rejected(self, paid):
        with pytest.raises(ValidationError):
            paid.append_items([_priced()])

    def test_item_status_rejected(self, paid):
        with pytest.raises(ValidationError):
            paid.update_line_item_status("item", "SERVED", index=0)

    def test_discount_rejected(self, paid):
        with pytest.raises(ValidationError):
            paid.apply_discount(percentage=10)

    def test_transfer_rejected(self, paid):
        with pytest.raises(ValidationError):
            paid.transfer_table("7")

    def test_notes_still_editable(self, paid):
        paid.update_details(notes="Left umbrella")
        assert paid.notes == "Left umbrella"


class TestTransfer:
    def test_moves_table(self):
        order = _order()
        order.transfer_table("7", new_table_id="table-7")
        assert order.table_number == "7"
        assert order.table_id == "table-7"
        event = order._events[-1]
        assert isinstance(event, TableTransferred)
        assert event.previous_table_number == "5"
        assert event.previous_table_status == "available"

    def test_unknown_old_table_status_rejected(self):
        with pytest.raises(ValidationError):
            _order().transfer_table("7", old_table_status="reserved")


class TestDetailsAndReplacement:
    def test_update_details(self):
        order = _order()
        applied = order.update_details(customer_name="Asha", priority="HIGH", guest_count=None)
        assert applied == {"customer_name": "Asha", "priority": "HIGH"}
        assert order.priority == "HIGH"
        assert isinstance(order._events[-1], OrderDetailsUpdated)

    def test_closed_field_set(self):
        with pytest.raises(ValidationError):
            _order().update_details(total_amount=1.0)

    def test_bad_priority(self):
        with pytest.raises(ValidationError):
            _order().update_details(priority="ASAP")

    def test_nothing_to_change_raises_no_event(self):
        order = _order()
        assert order.update_details(notes=None) == {}
        assert order._events == []

    def test_replace_items_keeps_extras_and_reprices(self):
        order = _order()
        order.append_items([_priced(base_price=40.0)], kind="extra")
        order.replace_items([_priced(name="Butter Naan", base_price=30.0, quantity=3)])
        assert [item.name for item in order.items] == ["Butter Naan"]
        assert len(order.extra_items) == 1
        assert order.subtotal == 130.0
        assert isinstance(order._events[-1], OrderItemsReplaced)


class TestBooking:
    def test_link_booking(self):
        order = _order()
        order.link_booking("bk-1", grc_no="GRC-9", room_number="5,6", guest_name="Mehta")
        assert order.booking_id == "bk-1"
        assert order.grc_no == "GRC-9"
        assert order.room_number == "5,6"
