"""
Par/order inference for handwritten order sheets.

Sheets are often only partly filled in: staff write the stock count and
sometimes an order quantity, rarely the par level. These rules derive the
missing numbers while always trusting whatever was actually handwritten.
"""
import uuid

from ..models.inventory import ExtractedRow, InventoryItem

UNKNOWN_DESCRIPTION = "Unknown Item"
DEFAULT_PAR = 10.0
STOCK_BUFFER = 5.0


def new_item_id(prefix: str = "item") -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def resolve_par(in_stock: float, par_raw: float, order_raw: float) -> float:
    if par_raw > 0:
        return par_raw
    if order_raw > 0:
        return in_stock + order_raw
    return in_stock + STOCK_BUFFER if in_stock > 0 else DEFAULT_PAR


def resolve_order(in_stock: float, par: float, order_raw: float) -> float:
    # A written order wins even when it disagrees with par - stock
    if order_raw > 0:
        return order_raw
    return max(0.0, par - in_stock)


def normalize_row(row: ExtractedRow) -> InventoryItem:
    in_stock = row.in_stock_raw
    price = row.price_raw
    par = resolve_par(in_stock, row.par_raw, row.order_raw)
    order = resolve_order(in_stock, par, row.order_raw)

    return InventoryItem(
        id=new_item_id(),
        description=row.description or UNKNOWN_DESCRIPTION,
        vendor=row.vendor,
        in_stock=in_stock,
        par=par,
        order=order,
        price=price,
    )


def normalize_rows(rows: list[ExtractedRow], vendor: str | None = None) -> list[InventoryItem]:
    """Normalize a whole extraction; ``vendor`` (when given) is stamped on every row."""
    items = []
    for row in rows:
        if vendor is not None:
            row = row.model_copy(update={"vendor": vendor})
        items.append(normalize_row(row))
    return items
