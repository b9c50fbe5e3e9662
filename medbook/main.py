import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import DATABASE_URL, FRONTEND_URL, SEED_DATABASE
from .database import Database
from .domain.appointments import router as appointments_router
from .domain.auth import router as auth_router
from .domain.doctors import router as doctors_router
from .domain.patients import router as patients_router
from .domain.scheduling import router as scheduling_router
from .domain.users import router as users_router
from .rate_limiter import get_redis_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("passlib").setLevel(logging.WARNING)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the API around a store handle.

    When no database is given, one is opened from ``DATABASE_URL`` at startup
    and disposed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        owns_database = database is None
        db_handle = database or Database(DATABASE_URL)
        app.state.database = db_handle

        db_handle.create_all()
        logger.info("Database tables created successfully")

        if SEED_DATABASE:
            from .seed import seed_database

            session = db_handle.session()
            try:
                seed_database(session)
            finally:
                session.close()

        if get_redis_client():
            logger.info("Redis connection established")
        else:
            logger.info("Redis not configured - rate limiting uses in-memory counters")

        yield

        logger.info("Application shutting down...")
        if owns_database:
            db_handle.dispose()

    app = FastAPI(title="MedBook API", version="1.0.0", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Convert validation errors on the Authorization header to 401 errors
        """
        for error in exc.errors():
            if error.get("loc") and "authorization" in str(error.get("loc")).lower():
                logger.warning(
                    f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
                )
                return JSONResponse(
                    status_code=401,
                    content={"detail": "No token, authorization denied"},
                )

        logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"❌ {request.method} {request.url.path} - Unhandled error: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Server error"})

    # CORS Configuration
    allowed_origins = [origin.strip() for origin in FRONTEND_URL.split(",") if origin.strip()]
    logger.info(f"CORS allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Routes
    app.include_router(auth_router)
    app.include_router(doctors_router)
    app.include_router(scheduling_router)
    app.include_router(appointments_router)
    app.include_router(patients_router)
    app.include_router(users_router)

    @app.get("/")
    def root():
        return {"message": "MedBook API is running"}

    @app.get("/health")
    def health(request: Request):
        db_handle: Database = request.app.state.database
        start_time = time.time()
        session = db_handle.session()
        try:
            session.execute(text("SELECT 1"))
        finally:
            session.close()
        response_time = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "database": {"connected": True, "response_time_ms": round(response_time, 2)},
        }

    return app


app = create_app()
