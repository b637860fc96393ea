from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import settings
from ..models.inventory import ExtractionResult, InventoryItem, ScanMode
from ..services.export import AutoExportOutcome, ExportService, WebhookClient, create_clipboard
from ..services.gemini_gateway import extract_inventory
from ..services.history import HistoryStore
from ..services.review import ReviewSession
from ..services.settings_store import SettingsStore
from ..services.storage import JsonFileStore, StateStoreBase

Extractor = Callable[[bytes, str], Awaitable[ExtractionResult]]


class AppState:
    """
    Process-wide state: one review session plus the durable history and
    settings, all loaded when the state is created.
    """

    def __init__(
        self,
        store: StateStoreBase,
        extractor: Extractor = extract_inventory,
        webhook: WebhookClient | None = None,
        clipboard=None,
    ):
        self.review = ReviewSession()
        self.history = HistoryStore(store)
        self.settings = SettingsStore(store)
        self.exporter = ExportService(
            self.history,
            webhook or WebhookClient(),
            clipboard or create_clipboard(settings.clipboard_command),
        )
        self.extractor = extractor


_state: AppState | None = None


def get_state() -> AppState:
    global _state
    if _state is None:
        _state = AppState(JsonFileStore(settings.state_dir))
    return _state


class ScanResponse(BaseModel):
    mode: ScanMode
    vendor: str
    items_extracted: int
    items: list[InventoryItem]
    message: str
    auto_export: AutoExportOutcome


class ItemUpdate(BaseModel):
    field: str
    value: str | float | int | None = None


class SettingsUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    script_url: str | None = Field(default=None, alias="scriptUrl")
    auto_export: bool | None = Field(default=None, alias="autoExport")


class SettingsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    google_sheet_url: str = Field(alias="googleSheetUrl")
    script_url: str = Field(alias="scriptUrl")
    auto_export: bool = Field(alias="autoExport")
    script_url_warning: str | None = Field(default=None, alias="scriptUrlWarning")
