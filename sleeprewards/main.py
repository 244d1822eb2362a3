import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from sleeprewards.core.config import settings
from sleeprewards.core.errors import AppError, app_error_handler, store_error_handler
from sleeprewards.core.logging import configure_logging
from sleeprewards.db.mongo import ensure_indexes
from sleeprewards.routes.profile import router as profile_router
from sleeprewards.routes.rewards import router as rewards_router
from sleeprewards.routes.sleep_logs import router as sleep_logs_router
from sleeprewards.routes.summary import router as summary_router

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application lifespan  (startup / shutdown)
# ─────────────────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # The unique indexes are what enforce one profile per user and one
    # sleep log per day, so they must exist before traffic arrives.
    logger.info("Ensuring MongoDB indexes…")
    await ensure_indexes()
    logger.info("Indexes ready (db=%s, day tz=%s).", settings.MONGO_DB_NAME, settings.DAY_BOUNDARY_TZ)

    yield   # application runs here

    logger.info("Shutting down.")


app = FastAPI(
    title="Sleep Rewards API",
    description="Log sleep, earn points, redeem rewards",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(PyMongoError, store_error_handler)

# Register routers
app.include_router(profile_router, prefix="/profile")
app.include_router(sleep_logs_router, prefix="/log")
app.include_router(rewards_router)
app.include_router(summary_router)


@app.get("/")
def root():
    """API information."""
    return {
        "app": "Sleep Rewards API",
        "version": "1.0.0",
        "status": "active",
        "endpoints": {
            "/log/sleep": "POST - Log today's sleep and earn points",
            "/rewards": "GET - Reward catalog",
            "/summary/weekly": "GET - 7-day sleep summary",
        },
    }


@app.get("/health")
def health_check():
    """Lightweight liveness ping."""
    return {"status": "ok"}
