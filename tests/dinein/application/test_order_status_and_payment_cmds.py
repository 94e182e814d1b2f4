"""Application tests for UpdateOrderStatus, ApplyDiscount and RecordPayment."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from dinein.order.details import UpdateOrderDetails
from dinein.order.items import AddItems
from dinein.order.order import Order
from dinein.order.payment import ApplyDiscount, RecordPayment
from dinein.order.status import UpdateItemStatus, UpdateOrderStatus
from dinein.order.transfer import TransferTable
from dinein.table.table import Table
from dinein.ticket.ticket import KitchenTicket


def _order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


def _table(number) -> Table:
    return current_domain.repository_for(Table).find_by_table_number(number)


def _ticket(order_id) -> KitchenTicket:
    return current_domain.repository_for(KitchenTicket).find_by_order_id(order_id)[0]


class TestUpdateOrderStatus:
    def test_ticket_follows(self, place_order):
        order_id = place_order()
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="ORDER_ACCEPTED"), asynchronous=False)
        assert _order(order_id).status == "ORDER_ACCEPTED"
        assert _ticket(order_id).status == "ORDER_ACCEPTED"

    def test_non_terminal_status_keeps_table(self, tables, place_order):
        order_id = place_order()
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="SERVED"), asynchronous=False)
        assert _table("5").status == "occupied"

    @pytest.mark.parametrize("status", ["CANCELLED", "PAID"])
    def test_terminal_status_releases_table(self, tables, place_order, status):
        order_id = place_order()
        current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)
        assert _table("5").status == "available"

    def test_unknown_status(self, place_order):
        order_id = place_order()
        with pytest.raises(ValidationError):
            current_domain.process(UpdateOrderStatus(order_id=order_id, status="LOST"), asynchronous=False)


class TestApplyDiscount:
    def test_percentage(self, place_order):
        order_id = place_order()
        current_domain.process(
            ApplyDiscount(order_id=order_id, percentage=10, reason="Regular", approved_by="mgr-1"),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.total_amount == pytest.approx(216.0)
        assert order.sgst == pytest.approx(5.4)
        assert order.cgst == pytest.approx(5.4)
        assert order.discount.reason == "Regular"

    def test_fixed_amount(self, place_order):
        order_id = place_order()
        current_domain.process(ApplyDiscount(order_id=order_id, amount=40.0), asynchronous=False)
        assert _order(order_id).total_amount == 200.0


class TestRecordPayment:
    def test_marks_paid_releases_table_and_ticket(self, tables, place_order):
        order_id = place_order()
        current_domain.process(RecordPayment(order_id=order_id), asynchronous=False)

        order = _order(order_id)
        assert order.status == "PAID"
        assert order.payment_status == "paid"
        assert order.payment.method == "CASH"
        assert order.payment.amount == 240.0
        assert _table("5").status == "available"
        assert _ticket(order_id).status == "PAID"

    def test_discount_percentage_applied_first(self, place_order):
        order_id = place_order()
        current_domain.process(
            RecordPayment(order_id=order_id, method="CARD", transaction_id="txn-1", discount_percentage=10),
            asynchronous=False,
        )
        order = _order(order_id)
        assert order.payment.amount == pytest.approx(216.0)
        assert order.payment.transaction_id == "txn-1"

    def test_paid_order_is_locked(self, place_order):
        order_id = place_order()
        current_domain.process(RecordPayment(order_id=order_id), asynchronous=False)

        locked = [
            RecordPayment(order_id=order_id),
            UpdateOrderStatus(order_id=order_id, status="PENDING"),
            UpdateItemStatus(order_id=order_id, index=0, status="SERVED"),
            AddItems(order_id=order_id, items=json.dumps([{"menu_item_id": "menu-lassi"}])),
            ApplyDiscount(order_id=order_id, percentage=5),
            TransferTable(order_id=order_id, new_table_number="7"),
            UpdateOrderDetails(order_id=order_id, items=json.dumps([{"menu_item_id": "menu-lassi"}])),
        ]
        for command in locked:
            with pytest.raises(ValidationError):
                current_domain.process(command, asynchronous=False)

        order = _order(order_id)
        assert order.status == "PAID"
        assert order.total_amount == 240.0

    def test_details_still_editable_after_payment(self, place_order):
        order_id = place_order()
        current_domain.process(RecordPayment(order_id=order_id), asynchronous=False)
        current_domain.process(UpdateOrderDetails(order_id=order_id, notes="Tip left in cash"), asynchronous=False)
        assert _order(order_id).notes == "Tip left in cash"
