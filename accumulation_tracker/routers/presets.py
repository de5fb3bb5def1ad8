from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from accumulation_tracker.deps.stores import get_history_store, get_preset_store
from accumulation_tracker.errors import PersistenceFailure
from accumulation_tracker.repositories.base import HistoryStore, PresetStore
from accumulation_tracker.schemas.history import HistoryRead
from accumulation_tracker.schemas.preset import PresetCreate, PresetRead, PresetUpdate
from accumulation_tracker.schemas.stats import PresetOverviewRead, PresetStatsRead, ProgressPointRead
from accumulation_tracker.services.stats import compute_overview, compute_preset_stats, progress_series

router = APIRouter(prefix="/presets", tags=["presets"])

def _get_or_404(store: PresetStore, preset_id: int):
    preset = store.get(preset_id)
    if not preset:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")
    return preset

def storage_unavailable(e: PersistenceFailure) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

@router.get("", response_model=list[PresetRead])
def list_presets(
    store: PresetStore = Depends(get_preset_store),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    # first visit gets the starter presets
    try:
        store.ensure_defaults()
    except PersistenceFailure as e:
        raise storage_unavailable(e)
    return store.list(limit=limit, offset=offset).items

@router.post("", response_model=PresetRead, status_code=status.HTTP_201_CREATED)
def create_preset(payload: PresetCreate, store: PresetStore = Depends(get_preset_store)):
    try:
        return store.create(payload)
    except PersistenceFailure as e:
        raise storage_unavailable(e)

# declared before /{preset_id} so "stats" isn't read as an id
@router.get("/stats", response_model=list[PresetOverviewRead])
def presets_overview(
    store: PresetStore = Depends(get_preset_store),
    histories: HistoryStore = Depends(get_history_store),
):
    """One summary per preset that has finished sessions, across all presets."""
    presets = store.list(limit=200).items
    return compute_overview((p, histories.list_for_preset(p.id)) for p in presets)

@router.get("/{preset_id}", response_model=PresetRead)
def get_preset(preset_id: int, store: PresetStore = Depends(get_preset_store)):
    return _get_or_404(store, preset_id)

@router.patch("/{preset_id}", response_model=PresetRead)
def update_preset(preset_id: int, payload: PresetUpdate, store: PresetStore = Depends(get_preset_store)):
    try:
        preset = store.update(preset_id, payload)
    except PersistenceFailure as e:
        raise storage_unavailable(e)
    if not preset:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")
    return preset

@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_preset(preset_id: int, store: PresetStore = Depends(get_preset_store)):
    try:
        deleted = store.delete(preset_id)
    except PersistenceFailure as e:
        raise storage_unavailable(e)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{preset_id}/history", response_model=list[HistoryRead])
def list_history(
    preset_id: int,
    store: PresetStore = Depends(get_preset_store),
    histories: HistoryStore = Depends(get_history_store),
):
    _get_or_404(store, preset_id)
    return histories.list_for_preset(preset_id)

@router.get("/{preset_id}/stats", response_model=PresetStatsRead | None)
def preset_stats(
    preset_id: int,
    store: PresetStore = Depends(get_preset_store),
    histories: HistoryStore = Depends(get_history_store),
):
    _get_or_404(store, preset_id)
    # null until the preset has at least one finished session
    return compute_preset_stats(histories.list_for_preset(preset_id))

@router.get("/{preset_id}/progress", response_model=list[ProgressPointRead])
def preset_progress(
    preset_id: int,
    store: PresetStore = Depends(get_preset_store),
    histories: HistoryStore = Depends(get_history_store),
):
    _get_or_404(store, preset_id)
    return progress_series(histories.list_for_preset(preset_id))
