"""
Spreadsheet export.

Rows go to a Google Apps Script webhook when one is configured; if it is
missing or fails, the same rows are written as tab-separated text to the
clipboard so they can be pasted into the sheet by hand. Both paths export a
description-sorted copy and never reorder the review session itself.
"""
import json
import shlex
import subprocess
from abc import ABC, abstractmethod
from typing import Literal

import httpx
from loguru import logger
from pydantic import BaseModel

from ..models.inventory import AppSettings, InventoryItem, InvoiceRecord, RecordStatus
from .history import HistoryStore
from .review import sort_by_description

EXPORT_FIELDS = ("inStock", "par", "order", "description", "vendor", "price")
TSV_COLUMNS = ("vendor", "description", "inStock", "par", "order", "price")
WEBHOOK_SUCCESS_MARKER = "Success"

CONNECTION_TEST_ITEM = InventoryItem(
    id="test",
    description="Connection Test",
    vendor="Test",
    in_stock=1,
    par=1,
    order=0,
    price=0,
)


class ClipboardPermissionError(Exception):
    """The clipboard refused the export text"""


def format_number(value: float) -> str:
    """Spreadsheet-style rendering: 4.0 -> '4', 2.5 -> '2.5'"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def sorted_for_export(items: list[InventoryItem]) -> list[InventoryItem]:
    return sort_by_description(items)


def export_rows(items: list[InventoryItem]) -> list[dict]:
    """Sorted rows as the webhook expects them (no id, camelCase)"""
    rows = []
    for item in sorted_for_export(items):
        data = item.model_dump(by_alias=True)
        rows.append({field: data[field] for field in EXPORT_FIELDS})
    return rows


def export_payload(items: list[InventoryItem]) -> dict:
    return {"items": export_rows(items)}


def to_tsv(items: list[InventoryItem]) -> str:
    lines = []
    for row in export_rows(items):
        cells = []
        for column in TSV_COLUMNS:
            value = row[column]
            cells.append(format_number(value) if isinstance(value, (int, float)) else str(value))
        lines.append("\t".join(cells))
    return "\n".join(lines)


class WebhookClient:
    """Posts rows to an Apps Script web app"""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    async def upload(self, items: list[InventoryItem], script_url: str | None) -> bool:
        if not script_url:
            return False

        body = json.dumps(export_payload(items))
        logger.info("Uploading rows to script", url=script_url, rows=len(items))

        try:
            # Apps Script answers /exec with a redirect to the actual response
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                r = await client.post(
                    script_url,
                    content=body,
                    headers={"Content-Type": "text/plain"},
                )
            text = r.text
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Upload error: {e}")
            return False

        logger.info("Script response", http_status=r.status_code, body=text[:200])
        if WEBHOOK_SUCCESS_MARKER in text:
            return True

        logger.error(f"Script returned error: {text[:200]}")
        return False

    async def test_connection(self, script_url: str | None) -> bool:
        return await self.upload([CONNECTION_TEST_ITEM], script_url)


class ClipboardWriter(ABC):
    @abstractmethod
    def write(self, text: str) -> None:
        """Place ``text`` on the clipboard or raise ClipboardPermissionError"""
        pass


class ResponseClipboard(ClipboardWriter):
    """
    The clipboard belongs to the client device: the TSV travels back in the
    HTTP response and the client copies it. Nothing can fail on this side.
    """

    def write(self, text: str) -> None:
        logger.debug("Returning TSV to client for clipboard copy", chars=len(text))


class CommandClipboard(ClipboardWriter):
    """Pipes the TSV into a system clipboard tool (pbcopy, wl-copy, xclip ...)"""

    def __init__(self, command: str):
        self.command = shlex.split(command)

    def write(self, text: str) -> None:
        try:
            subprocess.run(
                self.command,
                input=text,
                text=True,
                check=True,
                capture_output=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Clipboard failed: {e}")
            raise ClipboardPermissionError(str(e)) from e


def create_clipboard(command: str | None) -> ClipboardWriter:
    if command:
        return CommandClipboard(command)
    return ResponseClipboard()


class ExportOutcome(BaseModel):
    delivered_via: Literal["webhook", "clipboard", "none"]
    webhook_attempted: bool = False
    webhook_ok: bool = False
    clipboard_ok: bool | None = None
    tsv: str | None = None
    message: str
    record: InvoiceRecord | None = None


class AutoExportOutcome(BaseModel):
    status: Literal["sent", "failed", "skipped", "disabled"]
    message: str | None = None
    tsv: str | None = None
    record: InvoiceRecord | None = None


class ExportService:
    def __init__(self, history: HistoryStore, webhook: WebhookClient, clipboard: ClipboardWriter):
        self.history = history
        self.webhook = webhook
        self.clipboard = clipboard

    def copy_to_clipboard(self, items: list[InventoryItem]) -> tuple[bool, str]:
        tsv = to_tsv(items)
        try:
            self.clipboard.write(tsv)
        except ClipboardPermissionError:
            return False, tsv
        return True, tsv

    async def export(self, items: list[InventoryItem], app_settings: AppSettings) -> ExportOutcome:
        """
        Deliver the session rows: webhook first, clipboard on absence or failure.

        Every export is recorded in history as ``Uploaded``, whichever path
        delivered it, including a clipboard copy the client was denied.
        """
        webhook_attempted = bool(app_settings.script_url)
        webhook_ok = False
        notice = None

        if webhook_attempted:
            webhook_ok = await self.webhook.upload(items, app_settings.script_url)
            if webhook_ok:
                record = self.history.append(items, RecordStatus.UPLOADED)
                return ExportOutcome(
                    delivered_via="webhook",
                    webhook_attempted=True,
                    webhook_ok=True,
                    message="Sent to Sheet! (Sorted by name)",
                    record=record,
                )
            logger.warning("Webhook upload failed, falling back to clipboard")
            notice = "Auto-upload failed. Switching to manual copy."

        clipboard_ok, tsv = self.copy_to_clipboard(items)
        if clipboard_ok:
            message = "Data copied! (Sorted by name)"
        else:
            message = "Clipboard access denied. Please allow permissions."
        record = self.history.append(items, RecordStatus.UPLOADED)

        return ExportOutcome(
            delivered_via="clipboard" if clipboard_ok else "none",
            webhook_attempted=webhook_attempted,
            webhook_ok=webhook_ok,
            clipboard_ok=clipboard_ok,
            tsv=tsv,
            message=f"{notice} {message}" if notice else message,
            record=record,
        )

    async def auto_export(self, items: list[InventoryItem], app_settings: AppSettings) -> AutoExportOutcome:
        """Upload a fresh extraction straight away when the user opted in."""
        if not app_settings.auto_export:
            return AutoExportOutcome(status="disabled")
        if not app_settings.script_url:
            return AutoExportOutcome(
                status="skipped",
                message="Skipped Auto-Export: Script URL not set in Settings",
            )

        if await self.webhook.upload(items, app_settings.script_url):
            record = self.history.append(items, RecordStatus.UPLOADED)
            return AutoExportOutcome(status="sent", message="Auto-Export Successful!", record=record)

        return AutoExportOutcome(
            status="failed",
            message="Auto-Export Failed. Check settings.",
            tsv=to_tsv(items),
        )
