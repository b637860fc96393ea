import math
from datetime import datetime, UTC
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def to_number(value: Any) -> float:
    """Coerce a loosely typed value to a float; missing or non-numeric becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class ScanMode(str, Enum):
    """How a finished extraction lands in the review session"""
    NEW = "new"
    APPEND = "append"


class RecordStatus(str, Enum):
    DRAFT = "Draft"
    UPLOADED = "Uploaded"


class ExtractedRow(BaseModel):
    """One row as the model read it, before the par/order heuristic runs"""
    description: str = ""
    in_stock_raw: float = 0.0
    par_raw: float = 0.0
    order_raw: float = 0.0
    price_raw: float = 0.0
    vendor: str = ""

    @classmethod
    def from_model_item(cls, item: Any, vendor: str = "") -> "ExtractedRow":
        if not isinstance(item, dict):
            item = {}
        description = item.get("description")
        return cls(
            description=str(description).strip() if description else "",
            in_stock_raw=to_number(item.get("column1_inStock")),
            par_raw=to_number(item.get("column2_par")),
            order_raw=to_number(item.get("column3_order")),
            price_raw=to_number(item.get("column4_price")),
            vendor=vendor,
        )


class InventoryItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    description: str = ""
    vendor: str = ""
    in_stock: float = Field(0.0, alias="inStock")
    par: float = 0.0
    order: float = 0.0
    price: float = 0.0


class InvoiceRecord(BaseModel):
    """Snapshot of one export; never changed after creation"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    date: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    items: list[InventoryItem] = Field(default_factory=list)
    total_items: int = Field(0, alias="totalItems")
    status: RecordStatus = RecordStatus.UPLOADED


class AppSettings(BaseModel):
    """User-editable settings, persisted alongside history"""
    model_config = ConfigDict(populate_by_name=True)

    google_sheet_url: str = Field("", alias="googleSheetUrl")
    script_url: str = Field("", alias="scriptUrl")
    auto_export: bool = Field(True, alias="autoExport")


class ExtractionResult(BaseModel):
    vendor: str = ""
    rows: list[ExtractedRow] = Field(default_factory=list)
