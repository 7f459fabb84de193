import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from contextlib import asynccontextmanager

from config.config import (
    SESSION_SECRET_KEY, SESSION_MAX_AGE, SESSION_HTTPS_ONLY, SESSION_SAME_SITE,
    FRONTEND_URL, STORAGE_BACKEND, LOG_LEVEL,
)
from database.DB import Database
from database.MemoryDB import MemoryDatabase
from services.exceptions import DomainError
from routes import AuthRouter, ActivityRouter, RegistrationRouter, ComplaintRouter, NotificationRouter, PointsRouter

''' The backend API Endpoints setup '''

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def create_storage():
    if STORAGE_BACKEND == "memory":
        return MemoryDatabase()
    if STORAGE_BACKEND == "mongo":
        return Database()
    raise ValueError(f"Unknown STORAGE_BACKEND {STORAGE_BACKEND!r}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Initialize storage
    db = create_storage()
    db.connect()
    await db.check_connection()
    # Unique indexes back the duplicate-registration check; fail startup without them
    await db.ensure_indexes()
    app.state.db = db
    logger.info("Storage backend %s ready", STORAGE_BACKEND)

    yield

    # Shutdown: Clean up resources if needed
    logger.info("Application shutting down")

app = FastAPI(title="Training Points API", lifespan=lifespan)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid data", "errors": jsonable_encoder(exc.errors())},
    )


allowed_origins = [FRONTEND_URL]
if FRONTEND_URL != "http://localhost:5173":
    allowed_origins.append("http://localhost:5173")

logger.info("Allowed CORS origins: %s", allowed_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)

if not SESSION_SECRET_KEY:
    raise ValueError("SESSION_SECRET_KEY environment variable not set!")

app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET_KEY,
    session_cookie="session",
    max_age=SESSION_MAX_AGE,
    same_site=SESSION_SAME_SITE,
    https_only=SESSION_HTTPS_ONLY
)

# Include routers
app.include_router(AuthRouter.router, prefix="/api", tags=["Authentication"])
app.include_router(ActivityRouter.router, prefix="/api/activities", tags=["Activities"])
app.include_router(RegistrationRouter.router, prefix="/api/registrations", tags=["Registrations"])
app.include_router(ComplaintRouter.router, prefix="/api/complaints", tags=["Complaints"])
app.include_router(NotificationRouter.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(PointsRouter.router, prefix="/api/points", tags=["Points"])
