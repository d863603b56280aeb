import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flockpak.config import settings
from flockpak.database import engine
from flockpak.middleware.exceptions import register_exception_handlers
from flockpak.middleware.security import SecurityHeadersMiddleware
from flockpak.routers import (
    catch_batches,
    catch_sessions,
    crate_types,
    density,
    health,
    shrinkage,
    slaughter,
)
from flockpak.utils.cache import close_redis

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("flockpak")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("FlockPAK starting (environment=%s)", settings.environment)
    yield
    await close_redis()
    await engine.dispose()
    logger.info("FlockPAK stopped")


app = FastAPI(
    title="FlockPAK",
    description="Broiler catch weight planning & shrinkage reconciliation",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(crate_types.router, prefix="/api/crate-types", tags=["crate-types"])
app.include_router(density.router, prefix="/api/density", tags=["density"])
app.include_router(catch_sessions.router, prefix="/api/catch-sessions", tags=["catch-sessions"])
app.include_router(catch_batches.router, prefix="/api/catch-batches", tags=["catch-sessions"])
app.include_router(shrinkage.router, prefix="/api/shrinkage", tags=["shrinkage"])
app.include_router(slaughter.router, prefix="/api/slaughter", tags=["slaughter"])
