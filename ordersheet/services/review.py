"""
In-memory review session.

Holds the rows a user is checking before export. Edits to stock or par keep
``order = max(0, par - in_stock)``; editing ``order`` overrides it outright.
No other cross-field validation is applied to manual edits.
"""
from typing import Any, Iterable

from ..models.inventory import InventoryItem, ScanMode, to_number
from .normalization import DEFAULT_PAR, new_item_id

# camelCase (API) and snake_case (Python) spellings of editable fields
EDITABLE_FIELDS = {
    "description": "description",
    "vendor": "vendor",
    "inStock": "in_stock",
    "in_stock": "in_stock",
    "par": "par",
    "order": "order",
    "price": "price",
}
NUMERIC_FIELDS = {"in_stock", "par", "order", "price"}


class ItemNotFoundError(KeyError):
    pass


def description_key(item: InventoryItem) -> str:
    return item.description.lower()


def sort_by_description(items: Iterable[InventoryItem]) -> list[InventoryItem]:
    """Stable, case-insensitive sort; returns a new list"""
    return sorted(items, key=description_key)


class ReviewSession:
    def __init__(self, items: Iterable[InventoryItem] | None = None):
        self._items: list[InventoryItem] = list(items or [])

    @property
    def items(self) -> list[InventoryItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _index(self, item_id: str) -> int:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        raise ItemNotFoundError(item_id)

    def add(self) -> InventoryItem:
        """Append a blank row for manual entry"""
        item = InventoryItem(
            id=new_item_id("manual"),
            description="",
            vendor="",
            in_stock=0.0,
            par=DEFAULT_PAR,
            order=DEFAULT_PAR,
            price=0.0,
        )
        self._items.append(item)
        return item

    def remove(self, item_id: str) -> None:
        del self._items[self._index(item_id)]

    def update(self, item_id: str, field: str, value: Any) -> InventoryItem:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field '{field}' cannot be edited")

        attr = EDITABLE_FIELDS[field]
        index = self._index(item_id)
        current = self._items[index]

        if attr in NUMERIC_FIELDS:
            value = to_number(value)
        else:
            value = "" if value is None else str(value)

        changes = {attr: value}
        if attr in ("in_stock", "par"):
            in_stock = value if attr == "in_stock" else current.in_stock
            par = value if attr == "par" else current.par
            changes["order"] = max(0.0, par - in_stock)

        updated = current.model_copy(update=changes)
        self._items[index] = updated
        return updated

    def sort(self) -> None:
        self._items = sort_by_description(self._items)

    def apply_scan(self, items: Iterable[InventoryItem], mode: ScanMode) -> None:
        """Land freshly extracted rows according to the scan mode"""
        if ScanMode(mode) is ScanMode.APPEND:
            self._items.extend(items)
        else:
            self._items = list(items)

    def load(self, items: Iterable[InventoryItem]) -> None:
        """Replace everything, e.g. when reopening a history record"""
        self._items = [item.model_copy(deep=True) for item in items]

    def snapshot(self) -> list[InventoryItem]:
        return [item.model_copy(deep=True) for item in self._items]
