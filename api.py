"""
Users API FastAPI Application

Main entry point: registration, authentication, and user/profile
management on MongoDB.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Common library imports
from common.database import MongoDB
from common.middleware import RequestLoggingMiddleware
from common.utils import setup_exception_handlers, success_response

# App-specific imports
from accounts.config import settings
from accounts.dependencies import build_services
from accounts.models import DOCUMENT_MODELS

# Import routers
from accounts.auth.router import router as auth_router
from accounts.user.router import router as user_router
from accounts.profile.router import router as profile_router


# =============================================================================
# Logging
# =============================================================================
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("api")


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Connects to MongoDB (creating indexes), decides how user creation
    stays atomic, and builds the service container.
    """
    logger.info(f"Starting {settings.API_TITLE}...")
    settings.validate_required()

    database = MongoDB()
    await database.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        document_models=DOCUMENT_MODELS,
    )

    use_transactions = settings.MONGODB_USE_TRANSACTIONS
    if use_transactions is None:
        use_transactions = await database.supports_transactions()
    if not use_transactions:
        logger.warning(
            "Multi-document transactions disabled; user creation relies on "
            "compensating deletes"
        )

    app.state.database = database
    app.state.services = build_services(
        db=database.db,
        settings=settings,
        use_transactions=use_transactions,
    )
    logger.info(f"{settings.API_TITLE} started successfully")

    yield

    logger.info(f"Shutting down {settings.API_TITLE}...")
    await database.disconnect()
    app.state.services = None
    logger.info(f"{settings.API_TITLE} shut down complete")


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title=settings.API_TITLE,
    description="User accounts: sign-up, sign-in, users and profiles",
    version=settings.API_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

# =============================================================================
# Middleware & Error Handling
# =============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)

# =============================================================================
# Include Routers
# =============================================================================
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(profile_router)


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get("/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and the database connection.
    """
    database = getattr(app.state, "database", None)
    return success_response({
        "status": "ok",
        "version": settings.API_VERSION,
        "database": bool(database and await database.ping()),
    })


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
