from fastapi import APIRouter, Depends
from loguru import logger

from ..deps import AppState, get_state
from ...services.export import ExportOutcome

router = APIRouter(tags=["export"])


@router.post("/export", response_model=ExportOutcome)
async def export_items(state: AppState = Depends(get_state)):
    """
    Send the reviewed rows to the spreadsheet.

    Tries the configured script webhook first and falls back to a
    tab-separated clipboard copy (returned as ``tsv``). Rows are exported
    sorted by description; the session order is left alone.
    """
    items = state.review.snapshot()
    outcome = await state.exporter.export(items, state.settings.current)
    logger.info(
        "Export finished",
        delivered_via=outcome.delivered_via,
        rows=len(items),
        record_id=outcome.record.id if outcome.record else None,
    )
    return outcome
