import asyncio
from fastapi import APIRouter, Depends, HTTPException, Response, status
from accumulation_tracker.deps.stores import get_event_loop, get_preset_store, get_registry
from accumulation_tracker.engine import TrainingConfig
from accumulation_tracker.errors import InvalidConfiguration, InvalidTransition
from accumulation_tracker.repositories.base import PresetStore
from accumulation_tracker.schemas.live import HoldIn, LiveStart, LiveStateRead, RepsIn
from accumulation_tracker.services.live_session import LiveSession
from accumulation_tracker.services.registry import LiveSessionRegistry

# Routes are sync like the rest of the API; the optional rest countdown is
# handed the app loop when a session is created.
router = APIRouter(prefix="/live", tags=["live"])

def _get_live(session_id: str, registry: LiveSessionRegistry = Depends(get_registry)) -> LiveSession:
    live = registry.get(session_id)
    if not live:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Live session not found")
    return live

def _transition(op):
    try:
        return op()
    except InvalidConfiguration as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidTransition as e:   # includes NotArmed
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

def _resolve_config(payload: LiveStart, presets: PresetStore) -> tuple[TrainingConfig, str | None]:
    name = None
    if payload.preset_id is not None:
        preset = presets.get(payload.preset_id)
        if not preset:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Preset not found")
        name = preset.name
        if payload.config is None:
            return TrainingConfig(preset.mode, preset.target, preset.rest_time, preset.adjustment), name
    return payload.config.to_config(), name

@router.post("", response_model=LiveStateRead, status_code=status.HTTP_201_CREATED)
def start_live_session(
    payload: LiveStart,
    registry: LiveSessionRegistry = Depends(get_registry),
    presets: PresetStore = Depends(get_preset_store),
    loop: asyncio.AbstractEventLoop = Depends(get_event_loop),
):
    config, name = _resolve_config(payload, presets)
    live = registry.create(loop=loop)
    try:
        _transition(lambda: live.start(config, preset_id=payload.preset_id, preset_name=name))
    except HTTPException:
        registry.discard(live.id)
        raise
    return LiveStateRead.from_live(live)

@router.get("/{session_id}", response_model=LiveStateRead)
def get_live_session(live: LiveSession = Depends(_get_live)):
    return LiveStateRead.from_live(live)

@router.post("/{session_id}/start", response_model=LiveStateRead)
def restart_live_session(
    payload: LiveStart,
    live: LiveSession = Depends(_get_live),
    presets: PresetStore = Depends(get_preset_store),
):
    config, name = _resolve_config(payload, presets)
    _transition(lambda: live.start(config, preset_id=payload.preset_id, preset_name=name))
    return LiveStateRead.from_live(live)

@router.post("/{session_id}/bail-out", response_model=LiveStateRead)
def bail_out(payload: HoldIn, live: LiveSession = Depends(_get_live)):
    _transition(lambda: live.bail_out(payload.value))
    return LiveStateRead.from_live(live)

@router.post("/{session_id}/stop", response_model=LiveStateRead)
def stop(payload: HoldIn, live: LiveSession = Depends(_get_live)):
    _transition(lambda: live.stop(payload.value))
    return LiveStateRead.from_live(live)

@router.post("/{session_id}/done-with-set", response_model=LiveStateRead)
def done_with_set(payload: RepsIn, live: LiveSession = Depends(_get_live)):
    _transition(lambda: live.done_with_set(payload.reps))
    return LiveStateRead.from_live(live)

@router.post("/{session_id}/rest/tick", response_model=LiveStateRead)
def rest_tick(live: LiveSession = Depends(_get_live)):
    cue = _transition(live.rest_tick)
    return LiveStateRead.from_live(live, cue=cue)

@router.post("/{session_id}/rest/skip", response_model=LiveStateRead)
def skip_rest(live: LiveSession = Depends(_get_live)):
    _transition(live.skip_rest)
    return LiveStateRead.from_live(live)

@router.post("/{session_id}/reset", response_model=LiveStateRead)
def reset(live: LiveSession = Depends(_get_live)):
    live.reset()
    return LiveStateRead.from_live(live)

@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard(session_id: str, registry: LiveSessionRegistry = Depends(get_registry)):
    if not registry.discard(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Live session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
