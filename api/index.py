import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from availability_api.config import settings
from availability_api.database import close_pool, init_pool
from availability_api.routes.availability import router as availability_router
from availability_api.routes.blackouts import router as blackouts_router
from availability_api.routes.bookings import router as bookings_router
from availability_api.routes.windows import router as windows_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    await init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_timeout,
    )
    yield
    await close_pool()


app = FastAPI(title="Booking Availability API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _describe_error(error: dict) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
    message = error.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{'.'.join(loc)}: {message}" if loc else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning("Validation error for %s: %s", request.url.path, errors)
    detail = _describe_error(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(availability_router)
app.include_router(windows_router)
app.include_router(blackouts_router)
app.include_router(bookings_router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
