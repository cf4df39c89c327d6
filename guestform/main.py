import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from guestform.core.config import settings
from guestform.core.logging import setup_logging
from guestform.core.rate_limiter import limiter
from guestform.middleware.request_logger import RequestLoggerMiddleware
from guestform.web.routers.guest_form import router as guest_form_router


# -------------------------------------------------
# Logging
# -------------------------------------------------

setup_logging()
logger = logging.getLogger(__name__)

logger.info("Starting application")


# -------------------------------------------------
# FastAPI
# -------------------------------------------------

app = FastAPI(
    title="Guest Form",
    description="Guest registration forms, booked dates and booking mirrors",
    version="0.1.0",
)

# -------------------------------------------------
# Rate Limiting (slowapi)
# -------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggerMiddleware)

# The form is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "apikey", "x-client-info", "content-type"],
    max_age=7200,
)


@app.get("/health")
async def health():
    return {"ok": True}


app.include_router(guest_form_router)

# Directory is created on startup
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


# -------------------------------------------------
# Lifecycle
# -------------------------------------------------


@app.on_event("startup")
async def on_startup():
    logger.info("FastAPI startup")

    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    from guestform.database import init_db

    await init_db()


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("FastAPI shutdown")

    from guestform.database import engine

    await engine.dispose()
