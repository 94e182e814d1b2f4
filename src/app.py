"""Dine-in FastAPI application.

Processes order and table commands synchronously via HTTP.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - unset        → event_processing = "sync"  (ticket and table handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine, see server.py)
import os

from dinein.domain import dinein  # noqa: E402
from dinein.utils.logging import configure_logging  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

configure_logging(
    os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("PROTEAN_ENV") == "production",
)
dinein.init()

_DOMAIN_PREFIXES = ("/orders", "/tables")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Dine-in API",
    description="Restaurant dine-in orders, kitchen tickets and tables",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the dine-in domain context for domain routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with dinein.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from dinein.api import order_router, register_dinein_exception_handlers, table_router  # noqa: E402

app.include_router(order_router)
app.include_router(table_router)
register_dinein_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": dinein.name}})
