"""Shared BDD fixtures and step definitions for the Dine-in domain."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from dinein.order.creation import CreateOrder
from dinein.order.order import Order
from dinein.order.payment import RecordPayment
from dinein.table.management import RegisterTable
from dinein.table.table import Table
from dinein.ticket.ticket import KitchenTicket


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


def place_order(table_number, quantity, menu_item_id, addon_id):
    items = [{"menu_item_id": menu_item_id, "quantity": quantity, "addons": [{"addon_id": addon_id}]}]
    return current_domain.process(
        CreateOrder(items=json.dumps(items), table_number=table_number),
        asynchronous=False,
    )


def load_order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


def load_ticket(order_id) -> KitchenTicket:
    return current_domain.repository_for(KitchenTicket).find_by_order_id(order_id)[0]


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the menu has "{menu_item_id}" "{name}" priced {price:f}'))
def menu_item(catalog, menu_item_id, name, price):
    catalog.add_menu_item(menu_item_id, name, price)


@given(parsers.cfparse('the menu has addon "{addon_id}" "{name}" priced {price:f}'))
def menu_addon(catalog, addon_id, name, price):
    catalog.add_addon(addon_id, name, price)


@given(parsers.cfparse('table "{table_number}" is registered'))
def registered_table(table_number):
    current_domain.process(RegisterTable(table_number=table_number), asynchronous=False)


@given(
    parsers.cfparse(
        'an order for table "{table_number}" with {quantity:d} "{menu_item_id}" and addon "{addon_id}"'
    ),
    target_fixture="order_id",
)
def existing_order(table_number, quantity, menu_item_id, addon_id):
    return place_order(table_number, quantity, menu_item_id, addon_id)


@given("payment is recorded")
def paid_order(order_id):
    current_domain.process(RecordPayment(order_id=order_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status(order_id, status):
    assert load_order(order_id).status == status


@then(parsers.cfparse('the order payment status is "{status}"'))
def order_payment_status(order_id, status):
    assert load_order(order_id).payment_status == status


@then(parsers.cfparse("the order subtotal is {amount:f}"))
def order_subtotal(order_id, amount):
    assert load_order(order_id).subtotal == pytest.approx(amount)


@then(parsers.cfparse("the order total is {amount:f}"))
def order_total(order_id, amount):
    assert load_order(order_id).total_amount == pytest.approx(amount)


@then(parsers.cfparse("the order sgst is {sgst:f} and cgst is {cgst:f}"))
def order_taxes(order_id, sgst, cgst):
    order = load_order(order_id)
    assert order.sgst == pytest.approx(sgst)
    assert order.cgst == pytest.approx(cgst)


@then(parsers.cfparse('table "{table_number}" is "{status}"'))
def table_status(table_number, status):
    assert current_domain.repository_for(Table).find_by_table_number(table_number).status == status


@then(parsers.cfparse('the kitchen ticket status is "{status}"'))
def ticket_status(order_id, status):
    assert load_ticket(order_id).status == status


@then("the change is rejected")
def change_rejected(error):
    assert error["exc"] is not None
