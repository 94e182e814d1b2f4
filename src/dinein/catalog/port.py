"""Catalog port (abstract interface).

Defines the read-only menu lookups the pricing engine depends on. Adapters
resolve menu items, variations and addons by id and raise
``ObjectNotFoundError`` when a reference is unknown.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MenuEntry:
    """A menu item as the catalog currently prices it."""

    menu_item_id: str
    name: str
    price: float
    prep_time_minutes: int | None = None


@dataclass(frozen=True)
class PriceModifier:
    """A variation or addon: a named price that modifies a line item."""

    modifier_id: str
    name: str
    price: float


class Catalog(ABC):
    """Abstract menu catalog."""

    @abstractmethod
    def find_menu_item(self, menu_item_id: str) -> MenuEntry:
        """Return the menu entry or raise ObjectNotFoundError."""
        ...

    @abstractmethod
    def find_variation(self, variation_id: str) -> PriceModifier:
        """Return the variation or raise ObjectNotFoundError."""
        ...

    @abstractmethod
    def find_addon(self, addon_id: str) -> PriceModifier:
        """Return the addon or raise ObjectNotFoundError."""
        ...
