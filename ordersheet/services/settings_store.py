"""
User settings persistence (sheet URL, webhook URL, auto-export flag).
"""
from loguru import logger
from pydantic import ValidationError

from ..core.config import settings as app_config
from ..models.inventory import AppSettings
from .storage import StateStoreBase

SETTINGS_KEY = "ordersheet_settings"


def script_url_warning(url: str | None) -> str | None:
    """Apps Script web apps only accept posts on their deployed '/exec' URL."""
    if not url:
        return None
    if not url.rstrip("/").endswith("/exec"):
        return "Warning: URL should end in '/exec'. Do not use '/edit' or '/dev'."
    return None


class SettingsStore:
    def __init__(self, store: StateStoreBase, default_sheet_url: str | None = None):
        self._store = store
        self._default_sheet_url = default_sheet_url or app_config.default_sheet_url
        self._settings = self._load()

    def _defaults(self) -> AppSettings:
        return AppSettings(google_sheet_url=self._default_sheet_url, script_url="", auto_export=True)

    def _load(self) -> AppSettings:
        raw = self._store.read(SETTINGS_KEY)
        if raw is None:
            return self._defaults()
        if not isinstance(raw, dict):
            logger.error("Stored settings are not an object, using defaults")
            return self._defaults()
        try:
            parsed = AppSettings.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Failed to parse settings: {e.error_count()} invalid fields, using defaults")
            return self._defaults()

        # The target sheet is fixed per deployment; stored values never override it
        return parsed.model_copy(update={"google_sheet_url": self._default_sheet_url})

    @property
    def current(self) -> AppSettings:
        return self._settings.model_copy()

    def update(self, script_url: str | None = None, auto_export: bool | None = None) -> AppSettings:
        changes = {}
        if script_url is not None:
            changes["script_url"] = script_url.strip()
        if auto_export is not None:
            changes["auto_export"] = auto_export

        self._settings = self._settings.model_copy(update=changes)
        self._store.write(SETTINGS_KEY, self._settings.model_dump(by_alias=True))
        logger.info(
            "Settings updated",
            script_url_set=bool(self._settings.script_url),
            auto_export=self._settings.auto_export,
        )
        return self.current
