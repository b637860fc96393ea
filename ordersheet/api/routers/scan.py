from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from loguru import logger

from ..deps import AppState, ScanResponse, get_state
from ...models.inventory import ScanMode
from ...services.gemini_gateway import ExtractionError
from ...services.normalization import normalize_rows

router = APIRouter(tags=["scan"])


@router.post("/scan", response_model=ScanResponse)
async def scan(
    request: Request,
    file: UploadFile = File(None),
    mode: ScanMode = Query(ScanMode.NEW),
    state: AppState = Depends(get_state),
):
    """
    Read a photographed or uploaded order sheet into the review session.

    Accepts either:
    - multipart/form-data (camera capture or file picker)
    - a raw image/PDF body with its Content-Type header

    ``mode=new`` replaces the rows under review, ``mode=append`` adds the
    new rows after them. When auto-export is on, the fresh rows are also
    sent to the sheet webhook right away.
    """
    if file:
        content = await file.read()
        mime_type = file.content_type or "application/octet-stream"
    else:
        content = await request.body()
        mime_type = request.headers.get("content-type", "application/octet-stream")
        if not content:
            raise HTTPException(status_code=422, detail="No file provided (either multipart or raw body)")

    try:
        extraction = await state.extractor(content, mime_type)
    except ExtractionError as e:
        # Review session stays as it was, so an append scan keeps earlier rows
        raise HTTPException(status_code=502, detail=str(e))

    items = normalize_rows(extraction.rows, extraction.vendor)
    vendor = extraction.vendor or "Unknown Vendor"

    auto_export = await state.exporter.auto_export(items, state.settings.current)
    message = auto_export.message or f"Scanned {len(items)} items for {vendor}"

    state.review.apply_scan(items, mode)
    logger.info(
        "Scan applied to review session",
        mode=mode.value,
        extracted=len(items),
        total=len(state.review),
        auto_export=auto_export.status,
    )

    return ScanResponse(
        mode=mode,
        vendor=vendor,
        items_extracted=len(items),
        items=state.review.items,
        message=message,
        auto_export=auto_export,
    )
