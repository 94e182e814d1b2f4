"""In-memory catalog for development and testing.

Holds menu items, variations and addons in plain dictionaries. Tests seed it
through ``add_menu_item`` / ``add_variation`` / ``add_addon`` and install it
with ``dinein.catalog.set_catalog``.
"""

from protean.exceptions import ObjectNotFoundError

from dinein.catalog.port import Catalog, MenuEntry, PriceModifier


class InMemoryCatalog(Catalog):
    """Dictionary-backed catalog."""

    def __init__(self) -> None:
        self.menu_items: dict[str, MenuEntry] = {}
        self.variations: dict[str, PriceModifier] = {}
        self.addons: dict[str, PriceModifier] = {}
        self.lookups: list[tuple[str, str]] = []

    def add_menu_item(
        self,
        menu_item_id: str,
        name: str,
        price: float,
        prep_time_minutes: int | None = None,
    ) -> MenuEntry:
        entry = MenuEntry(
            menu_item_id=menu_item_id,
            name=name,
            price=price,
            prep_time_minutes=prep_time_minutes,
        )
        self.menu_items[menu_item_id] = entry
        return entry

    def add_variation(self, variation_id: str, name: str, price: float) -> PriceModifier:
        variation = PriceModifier(modifier_id=variation_id, name=name, price=price)
        self.variations[variation_id] = variation
        return variation

    def add_addon(self, addon_id: str, name: str, price: float) -> PriceModifier:
        addon = PriceModifier(modifier_id=addon_id, name=name, price=price)
        self.addons[addon_id] = addon
        return addon

    def find_menu_item(self, menu_item_id: str) -> MenuEntry:
        self.lookups.append(("menu_item", menu_item_id))
        try:
            return self.menu_items[menu_item_id]
        except KeyError:
            raise ObjectNotFoundError({"menu_item_id": [f"Menu item {menu_item_id} not found"]}) from None

    def find_variation(self, variation_id: str) -> PriceModifier:
        self.lookups.append(("variation", variation_id))
        try:
            return self.variations[variation_id]
        except KeyError:
            raise ObjectNotFoundError({"variation_id": [f"Variation {variation_id} not found"]}) from None

    def find_addon(self, addon_id: str) -> PriceModifier:
        self.lookups.append(("addon", addon_id))
        try:
            return self.addons[addon_id]
        except KeyError:
            raise ObjectNotFoundError({"addon_id": [f"Addon {addon_id} not found"]}) from None
