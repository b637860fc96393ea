from fastapi import APIRouter, Depends, HTTPException

from ..deps import AppState, ItemUpdate, get_state
from ...models.inventory import InventoryItem
from ...services.review import ItemNotFoundError

router = APIRouter(prefix="/review", tags=["review"])


@router.get("/items", response_model=list[InventoryItem])
async def list_items(state: AppState = Depends(get_state)):
    return state.review.items


@router.post("/items", response_model=InventoryItem, status_code=201)
async def add_item(state: AppState = Depends(get_state)):
    """Append a blank row (par 10, order 10) for manual entry"""
    return state.review.add()


@router.patch("/items/{item_id}", response_model=InventoryItem)
async def update_item(item_id: str, req: ItemUpdate, state: AppState = Depends(get_state)):
    """
    Edit one field of a row.

    Changing ``inStock`` or ``par`` recalculates ``order``; setting
    ``order`` overrides it without touching the other numbers.
    """
    try:
        return state.review.update(item_id, req.field, req.value)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/items/{item_id}", status_code=204)
async def delete_item(item_id: str, state: AppState = Depends(get_state)):
    try:
        state.review.remove(item_id)
    except ItemNotFoundError:
        raise HTTPException(status_code=404, detail="Item not found")


@router.post("/sort", response_model=list[InventoryItem])
async def sort_items(state: AppState = Depends(get_state)):
    """Sort the session by description (case-insensitive)"""
    state.review.sort()
    return state.review.items
