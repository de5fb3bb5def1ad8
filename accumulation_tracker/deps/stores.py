# accumulation_tracker/deps/stores.py
import asyncio
from functools import lru_cache, partial

from fastapi import Depends
from sqlalchemy.orm import Session

from accumulation_tracker.db import get_db
from accumulation_tracker.integrations.table_api import TableClient, TableSessionSink
from accumulation_tracker.repositories.base import HistoryStore, PresetStore
from accumulation_tracker.repositories.history_repo import HistoryRepository, ScopedHistoryRepository
from accumulation_tracker.repositories.preset_repo import PresetRepository
from accumulation_tracker.services.live_session import LiveSession
from accumulation_tracker.services.registry import LiveSessionRegistry
from accumulation_tracker.settings import get_settings
from accumulation_tracker.storage.kv_store import JsonFileKeyValueStore
from accumulation_tracker.storage.local_store import LocalCollections, LocalHistoryStore, LocalPresetStore

@lru_cache
def get_local_collections() -> LocalCollections:
    return LocalCollections(JsonFileKeyValueStore(get_settings().LOCAL_STORE_PATH))

def get_preset_store(db: Session = Depends(get_db)) -> PresetStore:
    if get_settings().STORAGE_BACKEND == "local":
        return LocalPresetStore(get_local_collections())
    return PresetRepository(db)

def get_history_store(db: Session = Depends(get_db)) -> HistoryStore:
    if get_settings().STORAGE_BACKEND == "local":
        return LocalHistoryStore(get_local_collections())
    return HistoryRepository(db)

@lru_cache
def get_registry() -> LiveSessionRegistry:
    """
    Live sessions outlive requests, so their history store can't be the
    request-scoped one: SQL sessions open their own DB session per save.
    Finished sessions are also mirrored to table storage when it's configured.
    """
    s = get_settings()
    if s.STORAGE_BACKEND == "local":
        store = LocalHistoryStore(get_local_collections())
    else:
        store = ScopedHistoryRepository()
    mirrors = []
    if s.TABLE_API_KEY and s.TABLE_API_BASE_ID:
        mirrors.append(TableSessionSink(TableClient()))
    factory = partial(
        LiveSession,
        store=store,
        mirrors=mirrors,
        arming_delay=s.ARMING_DELAY_SECONDS,
        warning_at=s.REST_WARNING_AT,
        auto_countdown=s.AUTO_REST_COUNTDOWN,
    )
    return LiveSessionRegistry(factory, idle_timeout=s.LIVE_SESSION_IDLE_SECONDS)

async def get_event_loop() -> asyncio.AbstractEventLoop:
    # resolved on the event loop; sync routes run in the threadpool
    return asyncio.get_running_loop()
