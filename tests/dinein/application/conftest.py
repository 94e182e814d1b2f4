import json

import pytest
from protean import current_domain

from dinein.order.creation import CreateOrder
from dinein.table.management import RegisterTable

THALI_FOR_TWO = {"menu_item_id": "menu-thali", "quantity": 2, "addons": [{"addon_id": "addon-paneer"}]}


@pytest.fixture()
def tables():
    """Tables 5 and 7, both available."""
    for number in ("5", "7"):
        current_domain.process(RegisterTable(table_number=number, capacity=4), asynchronous=False)


@pytest.fixture()
def place_order(catalog):
    """Place an order through CreateOrder; defaults to two thalis with paneer at table 5."""

    def _place(items=None, **kwargs):
        kwargs.setdefault("table_number", "5")
        return current_domain.process(
            CreateOrder(items=json.dumps(items or [THALI_FOR_TWO]), **kwargs),
            asynchronous=False,
        )

    return _place
