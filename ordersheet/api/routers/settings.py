from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ..deps import AppState, SettingsResponse, SettingsUpdate, get_state
from ...models.inventory import AppSettings
from ...services.settings_store import script_url_warning
from ...services.sheet_script import render_script

router = APIRouter(prefix="/settings", tags=["settings"])


def _to_response(current: AppSettings) -> SettingsResponse:
    return SettingsResponse(
        google_sheet_url=current.google_sheet_url,
        script_url=current.script_url,
        auto_export=current.auto_export,
        script_url_warning=script_url_warning(current.script_url),
    )


@router.get("", response_model=SettingsResponse)
async def get_settings(state: AppState = Depends(get_state)):
    return _to_response(state.settings.current)


@router.put("", response_model=SettingsResponse)
async def update_settings(req: SettingsUpdate, state: AppState = Depends(get_state)):
    """Change the webhook URL and/or the auto-export flag; persisted immediately"""
    updated = state.settings.update(script_url=req.script_url, auto_export=req.auto_export)
    return _to_response(updated)


@router.post("/test-connection")
async def test_connection(state: AppState = Depends(get_state)):
    """Post a single 'Connection Test' row to the configured webhook"""
    script_url = state.settings.current.script_url
    if not script_url:
        return {"success": False, "message": "Paste a URL first!"}

    success = await state.exporter.webhook.test_connection(script_url)
    if success:
        return {"success": True, "message": "Connection Successful!"}
    return {"success": False, "message": "Connection Failed. Check 'Who has access' is set to 'Anyone'"}


@router.get("/script-template", response_class=PlainTextResponse)
async def script_template(state: AppState = Depends(get_state)):
    """Apps Script receiver code bound to the configured spreadsheet"""
    return render_script(state.settings.current.google_sheet_url)
