"""
InternMatch - Main Application

FastAPI backend with:
- PostgreSQL for all records (raw SQL through SQLAlchemy)
- JWT authentication with email verification
- Messaging rules and the application lifecycle enforced server-side
- WebSocket push for new notifications

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, ProgrammingError, OperationalError

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import DataAccessError
from app.db.postgres import engine, test_database_connection
from app.db.schema import init_schema

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger("app")

# Create FastAPI app
app = FastAPI(
    title="InternMatch",
    description="""
    Internship marketplace connecting students and companies.

    ## Features
    - **Authentication**: JWT-based auth with email verification
    - **Students**: Browse and bookmark internships, apply with the resume on their profile
    - **Companies**: Post internships, review applications, schedule interviews
    - **Messaging**: Role- and application-aware messaging rules
    - **Notifications**: Feed with read tracking and realtime push over WebSocket
    - **Admin**: Dashboard counts, analytics, account management
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(SQLAlchemyError)
async def data_access_error_handler(request: Request, exc: SQLAlchemyError):
    """Every database failure reaches the client as a DataAccessError body."""
    logger.error("Data access failure on %s %s: %s", request.method, request.url.path, exc)
    error_text = str(exc).lower()
    if isinstance(exc, (ProgrammingError, OperationalError)) and (
        "no such table" in error_text or "does not exist" in error_text
    ):
        message = "Database is not set up. Please run the schema setup."
    else:
        message = "A database error occurred. Please try again."
    error = DataAccessError(message)
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create any missing tables on startup."""
    try:
        init_schema(engine)
        logger.info("Database schema ready")
    except SQLAlchemyError as e:
        logger.warning("Database schema initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "InternMatch"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected" if test_database_connection() else "disconnected"
    }
