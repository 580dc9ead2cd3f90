# src/app.py
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import APP_ENV, CORS_ORIGINS, DEV_CREATE_SCHEMA, LOG_LEVEL
from routes import collection
from routes.profiles import community, company
from routes.property import plan
from src.exceptions import AppException

from model import load_all_models
load_all_models()

logger = logging.getLogger(__name__)


app = FastAPI(title="Plan Tracker API", version="1.0.0")

logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
logger.info("Plan Tracker API starting (%s)…", APP_ENV)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)

app.include_router(company.router, prefix="/v1/companies", tags=["Companies"])
app.include_router(community.router, prefix="/v1/communities", tags=["Communities"])
app.include_router(plan.router, prefix="/v1/plans", tags=["Plans"])
app.include_router(collection.router, prefix="/v1/scrape", tags=["Collection"])


# --- Exception handlers and security headers ---
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(level, "%s %s on %s %s: %s", exc.code, exc.status_code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={
        "code": exc.code,
        "message": exc.message,
        "details": jsonable_encoder(exc.details),
    })

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={
        "code": "validation_error",
        "message": "Invalid request",
        "errors": jsonable_encoder(exc.errors()),
    })

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={
        "code": "internal_error",
        "message": "Internal server error",
    })

@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    return response


@app.on_event("startup")
def _startup():
    # Alembic owns the schema; create_all is a dev shortcut only
    if DEV_CREATE_SCHEMA:
        from config.db import get_engine
        from model.base import Base

        Base.metadata.create_all(get_engine())
        logger.info("DB metadata ensured via SQLAlchemy (dev mode).")
    else:
        logger.info("Skipping Base.metadata.create_all(); use Alembic migrations for schema.")


@app.get("/health")
def health():
    return {"status": "ok"}
