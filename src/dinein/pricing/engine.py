"""Pricing engine — pure line-item and order total computation.

Resolves requested line items against a Catalog and derives every monetary
figure on an order from its current line items:

    unit price  = variation price (if selected) else base price, + addon prices
    item total  = unit price x quantity
    subtotal    = sum of item totals (items and extra items)
    discount    = subtotal x percentage / 100, or a fixed amount capped at subtotal
    total       = subtotal - discount
    sgst / cgst = total x rate / 100, gst = sgst + cgst

Nothing here reads or writes state: the same inputs always produce the same
figures, so totals can be recomputed from scratch after every mutation.
Money values are plain floats and are never rounded here.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from dinein.catalog.port import Catalog

logger = structlog.get_logger(__name__)

DEFAULT_SGST_RATE = 2.5
DEFAULT_CGST_RATE = 2.5
DEFAULT_PREP_TIME_MINUTES = 15


@dataclass(frozen=True)
class LineItemRequest:
    """A caller's request for one line: what to price, not its price."""

    menu_item_id: str
    quantity: int = 1
    variation_id: str | None = None
    addon_ids: tuple[str, ...] = ()
    name: str | None = None
    time_to_prepare: int | None = None
    special_instructions: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "LineItemRequest":
        """Build a request from an API/command payload.

        Accepts ``menu_item_id`` or the older ``menu_id`` / ``item_id`` keys,
        a nested ``variation`` dict or a flat ``variation_id``, and addons as
        ``addon_ids`` or a list of ``{"addon_id": ...}`` dicts.
        """
        menu_item_id = data.get("menu_item_id") or data.get("menu_id") or data.get("item_id")
        if not menu_item_id:
            raise ValidationError({"menu_item_id": ["Each item must reference a menu item"]})

        variation_id = data.get("variation_id")
        if not variation_id and isinstance(data.get("variation"), dict):
            variation_id = data["variation"].get("variation_id")

        addon_ids = list(data.get("addon_ids") or [])
        for addon in data.get("addons") or []:
            addon_id = addon.get("addon_id") if isinstance(addon, dict) else addon
            if addon_id:
                addon_ids.append(addon_id)

        quantity = data.get("quantity", 1)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be a whole number of at least 1"]})

        return cls(
            menu_item_id=str(menu_item_id),
            quantity=quantity,
            variation_id=str(variation_id) if variation_id else None,
            addon_ids=tuple(str(a) for a in addon_ids),
            name=data.get("name") or data.get("item_name"),
            time_to_prepare=data.get("time_to_prepare"),
            special_instructions=data.get("special_instructions") or data.get("note"),
        )


@dataclass(frozen=True)
class PricedLineItem:
    """A resolved line item with its price snapshot."""

    menu_item_id: str
    name: str
    base_price: float
    quantity: int
    unit_price: float
    item_total: float
    time_to_prepare: int
    variation: dict | None = None
    addons: list[dict] = field(default_factory=list)
    special_instructions: str | None = None

    def to_dict(self) -> dict:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "base_price": self.base_price,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "item_total": self.item_total,
            "time_to_prepare": self.time_to_prepare,
            "variation": self.variation,
            "addons": list(self.addons),
            "special_instructions": self.special_instructions,
        }


@dataclass(frozen=True)
class PricingSummary:
    """Order-level figures derived from the current line items."""

    subtotal: float
    discount_amount: float
    total_amount: float
    sgst: float
    cgst: float
    gst: float
    sgst_rate: float
    cgst_rate: float


# ---------------------------------------------------------------------------
# Line item arithmetic
# ---------------------------------------------------------------------------
def unit_price(base_price: float, variation_price: float | None = None, addon_prices=()) -> float:
    """Variation price overrides the base price; addons are added on top."""
    price = variation_price if variation_price is not None else base_price
    return price + sum(addon_prices)


def item_total(
    base_price: float,
    quantity: int,
    variation_price: float | None = None,
    addon_prices=(),
) -> float:
    if quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})
    total = unit_price(base_price, variation_price, addon_prices) * quantity
    if total < 0:
        raise ValidationError({"item_total": ["Item total cannot be negative"]})
    return total


# ---------------------------------------------------------------------------
# Catalog resolution
# ---------------------------------------------------------------------------
def parse_line_item_requests(raw) -> list[LineItemRequest]:
    """Parse a JSON string or list of dicts into line item requests.

    An absent or empty list is a validation error: an order operation always
    needs at least one line.
    """
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not data:
        raise ValidationError({"items": ["At least one item is required"]})
    if not isinstance(data, list):
        raise ValidationError({"items": ["Items must be a list"]})
    return [LineItemRequest.from_dict(item) for item in data]


def resolve_line_item(
    request: LineItemRequest,
    catalog: Catalog,
    default_prep_time: int = DEFAULT_PREP_TIME_MINUTES,
) -> PricedLineItem:
    """Resolve one request against the catalog and price it.

    An unknown menu item or variation raises ObjectNotFoundError. Unknown
    addons are dropped from the line and do not contribute to its price.
    """
    entry = catalog.find_menu_item(request.menu_item_id)

    variation = None
    if request.variation_id:
        found = catalog.find_variation(request.variation_id)
        variation = {"variation_id": found.modifier_id, "name": found.name, "price": found.price}

    addons = []
    for addon_id in request.addon_ids:
        try:
            found = catalog.find_addon(addon_id)
        except ObjectNotFoundError:
            logger.info("Dropping unresolved addon", addon_id=addon_id, menu_item_id=request.menu_item_id)
            continue
        addons.append({"addon_id": found.modifier_id, "name": found.name, "price": found.price})

    for price, label in [(entry.price, "base_price")] + [(a["price"], "addon_price") for a in addons]:
        if price < 0:
            raise ValidationError({label: ["Catalog prices cannot be negative"]})

    variation_price = variation["price"] if variation else None
    addon_prices = [a["price"] for a in addons]

    return PricedLineItem(
        menu_item_id=entry.menu_item_id,
        name=request.name or entry.name,
        base_price=entry.price,
        quantity=request.quantity,
        unit_price=unit_price(entry.price, variation_price, addon_prices),
        item_total=item_total(entry.price, request.quantity, variation_price, addon_prices),
        time_to_prepare=request.time_to_prepare or entry.prep_time_minutes or default_prep_time,
        variation=variation,
        addons=addons,
        special_instructions=request.special_instructions,
    )


def resolve_line_items(
    requests: list[LineItemRequest],
    catalog: Catalog,
    default_prep_time: int = DEFAULT_PREP_TIME_MINUTES,
) -> list[PricedLineItem]:
    """Resolve every request, failing as a whole if any reference is unknown."""
    return [resolve_line_item(request, catalog, default_prep_time) for request in requests]


# ---------------------------------------------------------------------------
# Aggregate figures
# ---------------------------------------------------------------------------
def discount_amount_for(subtotal: float, percentage: float | None = None, amount: float | None = None) -> float:
    """Percentage discounts are recomputed from the subtotal; fixed ones are capped."""
    if percentage is not None:
        if not 0 <= percentage <= 100:
            raise ValidationError({"discount_percentage": ["Discount percentage must be between 0 and 100"]})
        return subtotal * percentage / 100
    if amount:
        if amount < 0:
            raise ValidationError({"discount_amount": ["Discount amount cannot be negative"]})
        return min(amount, subtotal)
    return 0.0


def compute_totals(
    item_totals,
    discount_percentage: float | None = None,
    discount_amount: float | None = None,
    sgst_rate: float | None = None,
    cgst_rate: float | None = None,
) -> PricingSummary:
    """Compute subtotal, discount, total and taxes from item totals.

    Taxes apply to the discounted total, not the subtotal. A ``None`` rate
    falls back to the default; ``0`` is an explicit zero rate.
    """
    sgst_rate = DEFAULT_SGST_RATE if sgst_rate is None else sgst_rate
    cgst_rate = DEFAULT_CGST_RATE if cgst_rate is None else cgst_rate
    if sgst_rate < 0 or cgst_rate < 0:
        raise ValidationError({"tax_rate": ["Tax rates cannot be negative"]})

    subtotal = float(sum(item_totals))
    discount = discount_amount_for(subtotal, discount_percentage, discount_amount)
    total = subtotal - discount
    sgst = total * sgst_rate / 100
    cgst = total * cgst_rate / 100

    return PricingSummary(
        subtotal=subtotal,
        discount_amount=discount,
        total_amount=total,
        sgst=sgst,
        cgst=cgst,
        gst=sgst + cgst,
        sgst_rate=sgst_rate,
        cgst_rate=cgst_rate,
    )
