# File: main.py

from contextlib import asynccontextmanager

import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration

from civiclens.api.middleware.error_middleware import ErrorLoggingMiddleware
from civiclens.api.routers.all_endpoints import all_routers
from civiclens.common.config.settings import settings
from civiclens.common.exceptions.exception_handlers import register_exception_handlers
from civiclens.common.logging.logger import log_info, log_error
from civiclens.infrastructure.database.mongodb.connection import MongoDBConnection
from civiclens.infrastructure.database.mongodb.mongo_client import (
    DUPLICATE_SUBMISSIONS_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    REPORTS_COLLECTION,
    USERS_COLLECTION,
)
from civiclens.infrastructure.database.mongodb.repository import MongoRepository
from civiclens.infrastructure.database.redis.redis_client import init_redis_pool, close_redis_pool
from civiclens.infrastructure.setup.initial_setup import ensure_indexes, setup_authority

# Load environment variables
load_dotenv()

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.ENVIRONMENT,
        send_default_pii=settings.SENTRY_SEND_PII
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup tasks
    try:
        await MongoDBConnection.connect()
        db = MongoDBConnection.get_db()

        users_repo = MongoRepository(db, USERS_COLLECTION)
        await ensure_indexes(
            MongoRepository(db, REPORTS_COLLECTION),
            MongoRepository(db, DUPLICATE_SUBMISSIONS_COLLECTION),
            users_repo,
            MongoRepository(db, NOTIFICATIONS_COLLECTION),
        )
        await setup_authority(users_repo)

        await init_redis_pool()

        log_info("Registered routes", extra={"routes": [route.path for route in app.routes]})
        log_info("CivicLens API started", extra={"version": app.version})
    except Exception as e:
        log_error("Startup failed", extra={"error": str(e)})
        sentry_sdk.capture_exception(e)
        raise

    yield  # Application is running

    # Shutdown tasks
    await MongoDBConnection.disconnect()
    await close_redis_pool()
    log_info("CivicLens API stopped")


# Create FastAPI app instance
app = FastAPI(
    title="CivicLens API",
    version="1.0.0",
    description="Civic issue reporting with AI-assisted duplicate detection.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


# Request logger middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    log_info("Incoming request", extra={"method": request.method, "url": str(request.url)})
    return await call_next(request)

# Register middlewares
app.add_middleware(ErrorLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Register routers
app.include_router(all_routers)
