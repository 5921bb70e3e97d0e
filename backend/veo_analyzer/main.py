# veo_analyzer/main.py
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import RedirectResponse, JSONResponse

from veo_analyzer.core.config import get_settings
from veo_analyzer.core.logger import log_info
from veo_analyzer.api import router as api_router
from veo_analyzer.api.dependencies import get_registry
from veo_analyzer.middleware.request_log import RequestLogMiddleware

settings = get_settings()  # reads .env, ensure_dirs() is called inside


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # release every session's video on shutdown
    registry = get_registry()
    log_info(f"SHUTDOWN sessions={len(registry)}")
    registry.close_all()


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# -----------------------------
# CORS
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# Static mounts
# -----------------------------
# uploaded videos, playable by the client while the session holds them
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=str(settings.UPLOAD_DIR)), name="uploads")

# -----------------------------
# Routers
# -----------------------------
app.include_router(api_router, prefix=settings.API_PREFIX)

app.add_middleware(RequestLogMiddleware)


# -----------------------------
# Utility endpoints
# -----------------------------
@app.get("/", include_in_schema=False)
def root():
    """
    Redirect to /docs.
    """
    return RedirectResponse(url="/docs")

@app.get("/healthz", tags=["system"])
def health():
    return JSONResponse({"ok": True, "name": settings.APP_NAME})

@app.get("/version", tags=["system"])
def version():
    """
    Active configuration, useful when debugging a client against the API.
    """
    return {
        "app": settings.APP_NAME,
        "debug": settings.DEBUG,
        "api_prefix": settings.API_PREFIX,
        "upload_url_prefix": settings.UPLOAD_URL_PREFIX,
        "model": settings.GEMINI_MODEL_VISION,
        "public_base_url": settings.base_url_str(),
    }
