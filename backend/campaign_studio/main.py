from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse

from .routes_auth import router as auth_router
from .routes_campaigns import router as campaigns_router
from .routes_wizard import router as wizard_router
from .services.campaign_store import StoreError
from .services.validation import ValidationError
from .services.wizard import FinalizeInProgress, NotAuthenticated, StepIncomplete
from .settings import get_settings

logger = logging.getLogger("campaign_studio")

app = FastAPI()
settings = get_settings()
logger.setLevel(settings.log_level.upper())

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "failures": [f.to_dict() for f in exc.failures]},
    )


@app.exception_handler(StepIncomplete)
async def step_incomplete_handler(request: Request, exc: StepIncomplete):
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "step": exc.step_index,
            "failures": [f.to_dict() for f in exc.failures],
        },
    )


@app.exception_handler(FinalizeInProgress)
async def finalize_in_progress_handler(request: Request, exc: FinalizeInProgress):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(NotAuthenticated)
async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    return RedirectResponse(settings.login_url, status_code=303)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Campaign store failed on %s %s: %s", request.method, request.url, exc)
    return JSONResponse(status_code=503, content={"detail": "Campaign could not be saved, please try again"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url)
    return PlainTextResponse("Internal Server Error", status_code=500)


@app.get("/ping")
async def ping():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(wizard_router)
app.include_router(campaigns_router)


@app.on_event("startup")
async def startup_event():
    """Create tables on startup when running without migrations."""
    if settings.auto_create_tables:
        from .db import create_tables
        await create_tables()
        logger.info("Database tables created on app startup")
