from fastapi import APIRouter, Depends, HTTPException

from ..deps import AppState, get_state
from ...models.inventory import InventoryItem, InvoiceRecord
from ...services.history import RecordNotFoundError

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=list[InvoiceRecord])
async def list_history(state: AppState = Depends(get_state)):
    """Past exports, newest first"""
    return state.history.list_all()


@router.get("/{record_id}", response_model=InvoiceRecord)
async def get_record(record_id: str, state: AppState = Depends(get_state)):
    try:
        return state.history.get(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="History record not found")


@router.post("/{record_id}/open", response_model=list[InventoryItem])
async def open_record(record_id: str, state: AppState = Depends(get_state)):
    """Load a past export back into the review session, replacing what is there"""
    try:
        record = state.history.get(record_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="History record not found")

    state.review.load(record.items)
    return state.review.items
