# accumulation_tracker/main.py
import time
import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from accumulation_tracker.routers.presets import router as presets_router
from accumulation_tracker.routers.history import router as history_router
from accumulation_tracker.routers.live import router as live_router
from accumulation_tracker.db import SessionLocal  # for healthz DB check
from accumulation_tracker.settings import get_settings

log = logging.getLogger("uvicorn")

app = FastAPI(
    title="Accumulation Tracker API",
    openapi_tags=[
        {"name": "presets", "description": "Saved training configurations"},
        {"name": "history", "description": "Finished sessions"},
        {"name": "live", "description": "Running sessions: attempts, rest and reset"},
    ],
)


# CORS (relax for local dev; tighten origins in prod via env)
ALLOW_ORIGINS = [o.strip() for o in get_settings().ALLOW_ORIGINS.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

@app.get("/")
def root():
    return {"ok": True, "name": "Accumulation Tracker API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz():
    # Quick DB sanity check
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as e:
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": get_settings().API_VERSION}

# Routers
app.include_router(presets_router)
app.include_router(history_router)
app.include_router(live_router)
