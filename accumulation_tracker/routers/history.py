from fastapi import APIRouter, Depends, HTTPException, Response, status
from accumulation_tracker.deps.stores import get_history_store
from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.repositories.base import HistoryStore
from accumulation_tracker.routers.presets import storage_unavailable
from accumulation_tracker.schemas.history import HistoryRead

router = APIRouter(prefix="/history", tags=["history"])

@router.get("/{history_id}", response_model=HistoryRead)
def get_history(history_id: int, histories: HistoryStore = Depends(get_history_store)):
    row = histories.get(history_id)
    if not row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return row

@router.delete("/{history_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_history(history_id: int, histories: HistoryStore = Depends(get_history_store)):
    try:
        deleted = histories.delete(history_id)
    except PersistenceFailure as e:
        raise storage_unavailable(e)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
