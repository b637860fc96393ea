from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from ..core.logging import setup_logging
from ..core.config import settings
from .deps import get_state
from .routers import export, health, history, review, scan, settings as settings_router

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # History and settings are read once here and rewritten on every change
    state = app.dependency_overrides.get(get_state, get_state)()
    logger.info(
        "Loaded persisted state",
        history_records=len(state.history),
        script_url_set=bool(state.settings.current.script_url),
    )
    yield


app = FastAPI(title="OrderSheet Scanner", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# CORS_ORIGINS can be set in .env as comma-separated list
allowed_origins = [origin.strip() for origin in settings.cors_origins.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(scan.router)
app.include_router(review.router)
app.include_router(export.router)
app.include_router(history.router)
app.include_router(settings_router.router)
