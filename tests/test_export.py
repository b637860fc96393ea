"""
Tests for spreadsheet export: TSV rendering, webhook delivery and the
webhook -> clipboard fallback chain.
"""

import asyncio
import json

import httpx
import pytest
import respx

from ordersheet.models.inventory import AppSettings, InventoryItem, RecordStatus
from ordersheet.services.export import (
    ClipboardPermissionError,
    ClipboardWriter,
    CommandClipboard,
    ExportService,
    ResponseClipboard,
    WebhookClient,
    export_payload,
    to_tsv,
)
from ordersheet.services.history import HistoryStore
from ordersheet.services.storage import MemoryStore

SCRIPT_URL = "https://script.google.com/macros/s/abc123/exec"


class DeniedClipboard(ClipboardWriter):
    def write(self, text):
        raise ClipboardPermissionError("denied")


class RecordingClipboard(ClipboardWriter):
    def __init__(self):
        self.text = None

    def write(self, text):
        self.text = text


def item(item_id, description, **kwargs):
    return InventoryItem(id=item_id, description=description, **kwargs)


@pytest.fixture
def items():
    return [
        item("1", "banana", vendor="V", in_stock=1, par=5, order=4, price=0.5),
        item("2", "Apple", vendor="V", in_stock=0, par=10, order=10, price=3),
    ]


@pytest.fixture
def history():
    return HistoryStore(MemoryStore())


def test_tsv_line_format():
    tsv = to_tsv([item("x", "D", vendor="V", in_stock=1, par=5, order=4, price=2.5)])
    assert tsv == "V\tD\t1\t5\t4\t2.5"


def test_tsv_sorted_without_header(items):
    lines = to_tsv(items).split("\n")
    assert lines == ["V\tApple\t0\t10\t10\t3", "V\tbanana\t1\t5\t4\t0.5"]


def test_export_does_not_reorder_input(items):
    to_tsv(items)
    assert [i.id for i in items] == ["1", "2"]


def test_payload_fields(items):
    payload = export_payload(items)
    assert [row["description"] for row in payload["items"]] == ["Apple", "banana"]
    assert set(payload["items"][0]) == {"inStock", "par", "order", "description", "vendor", "price"}


@respx.mock
def test_webhook_success_when_body_contains_marker(items):
    route = respx.post(SCRIPT_URL).mock(return_value=httpx.Response(200, text="Success: 0 rows"))

    assert asyncio.run(WebhookClient().upload(items, SCRIPT_URL)) is True

    request = route.calls.last.request
    assert request.headers["content-type"] == "text/plain"
    body = json.loads(request.content)
    assert body["items"][0]["description"] == "Apple"


@respx.mock
def test_webhook_error_body_is_failure(items):
    respx.post(SCRIPT_URL).mock(return_value=httpx.Response(200, text="Error: locked"))
    assert asyncio.run(WebhookClient().upload(items, SCRIPT_URL)) is False


@respx.mock
def test_webhook_transport_error_is_failure(items):
    respx.post(SCRIPT_URL).mock(side_effect=httpx.ConnectError("offline"))
    assert asyncio.run(WebhookClient().upload(items, SCRIPT_URL)) is False


def test_webhook_without_url_makes_no_request(items):
    with respx.mock(assert_all_called=False) as mock:
        assert asyncio.run(WebhookClient().upload(items, "")) is False
        assert len(mock.calls) == 0


def test_command_clipboard_missing_tool_reports_permission_error():
    clipboard = CommandClipboard("definitely-not-a-clipboard-tool-4711")
    with pytest.raises(ClipboardPermissionError):
        clipboard.write("text")


@respx.mock
def test_export_via_webhook_records_uploaded(items, history):
    respx.post(SCRIPT_URL).mock(return_value=httpx.Response(200, text="Success"))
    service = ExportService(history, WebhookClient(), ResponseClipboard())

    outcome = asyncio.run(service.export(items, AppSettings(script_url=SCRIPT_URL)))

    assert outcome.delivered_via == "webhook"
    assert outcome.tsv is None
    assert history.list_all()[0].status == RecordStatus.UPLOADED
    assert history.list_all()[0].total_items == 2


@respx.mock
def test_export_falls_back_to_clipboard(items, history):
    respx.post(SCRIPT_URL).mock(return_value=httpx.Response(500, text="Error: boom"))
    clipboard = RecordingClipboard()
    service = ExportService(history, WebhookClient(), clipboard)

    outcome = asyncio.run(service.export(items, AppSettings(script_url=SCRIPT_URL)))

    assert outcome.delivered_via == "clipboard"
    assert outcome.webhook_attempted and not outcome.webhook_ok
    assert outcome.clipboard_ok is True
    assert clipboard.text == outcome.tsv
    assert "Switching to manual copy" in outcome.message
    assert outcome.record.status == RecordStatus.UPLOADED


def test_export_without_webhook_uses_clipboard(items, history):
    service = ExportService(history, WebhookClient(), RecordingClipboard())
    outcome = asyncio.run(service.export(items, AppSettings()))
    assert outcome.delivered_via == "clipboard"
    assert outcome.webhook_attempted is False


def test_clipboard_denied_reported_distinctly(items, history):
    service = ExportService(history, WebhookClient(), DeniedClipboard())

    outcome = asyncio.run(service.export(items, AppSettings()))

    assert outcome.delivered_via == "none"
    assert outcome.clipboard_ok is False
    assert outcome.message == "Clipboard access denied. Please allow permissions."
    assert outcome.record.status == RecordStatus.UPLOADED


def test_auto_export_skipped_without_url(items, history):
    service = ExportService(history, WebhookClient(), ResponseClipboard())
    outcome = asyncio.run(service.auto_export(items, AppSettings(auto_export=True)))
    assert outcome.status == "skipped"
    assert len(history) == 0


def test_auto_export_disabled(items, history):
    service = ExportService(history, WebhookClient(), ResponseClipboard())
    outcome = asyncio.run(service.auto_export(items, AppSettings(auto_export=False, script_url=SCRIPT_URL)))
    assert outcome.status == "disabled"


@respx.mock
def test_auto_export_failure_returns_tsv(items, history):
    respx.post(SCRIPT_URL).mock(return_value=httpx.Response(200, text="Error: locked"))
    service = ExportService(history, WebhookClient(), ResponseClipboard())

    outcome = asyncio.run(service.auto_export(items, AppSettings(script_url=SCRIPT_URL)))

    assert outcome.status == "failed"
    assert outcome.tsv.startswith("V\tApple")
    assert len(history) == 0
