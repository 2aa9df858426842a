"""
Climate Data API - Backend
==========================
FastAPI application serving climate sensor readings and user accounts
from MongoDB.

ARCHITECTURE:
    [Client] --HTTP--> [Routers] --> [Repositories] --> [MongoConnection] --> [MongoDB]
                           |
                           +-- write endpoints go through the API key gate first

COLLECTIONS:
    1. ClimateData  - Sensor readings (temperature, precipitation, wind, ...)
    2. UserAccounts - Teachers and students, each with an API key

HOW TO RUN:
    # Install
    pip install -e .

    # Point it at MongoDB
    cp env.example.txt .env
    # Edit .env with your settings

    # Run the server
    uvicorn climate_api.main:app --reload --port 8000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
    - OpenAPI JSON: http://localhost:8000/openapi.json
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from climate_api.config import Config
from climate_api.routers import climate_router, users_router, set_repositories
from climate_api.services import ClimateRepository, MongoConnection, UserRepository


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
    datefmt='%H:%M:%S',
    handlers=[logging.StreamHandler(sys.stderr)]
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Create the shared MongoDB client
        2. Build the repositories on top of it
        3. Inject them into the routers

    SHUTDOWN:
        1. Close the MongoDB client
    """
    # ========== STARTUP ==========
    connection = MongoConnection(
        Config.MONGO_CONNECTION_STRING,
        Config.MONGO_DATABASE_NAME,
        server_selection_timeout_ms=Config.MONGO_SERVER_SELECTION_TIMEOUT_MS,
        connect_timeout_ms=Config.MONGO_CONNECT_TIMEOUT_MS,
        socket_timeout_ms=Config.MONGO_SOCKET_TIMEOUT_MS,
        max_pool_size=Config.MONGO_MAX_POOL_SIZE,
    )
    climate_repository = ClimateRepository(
        connection,
        precipitation_lookback_months=Config.PRECIPITATION_LOOKBACK_MONTHS,
    )
    user_repository = UserRepository(connection)

    set_repositories(climate_repository, user_repository)
    app.state.connection = connection

    logger.info("Climate Data API starting")
    logger.info(f"   Database: {Config.MONGO_DATABASE_NAME}")
    logger.info(f"   Precipitation lookback: {Config.PRECIPITATION_LOOKBACK_MONTHS} months")
    logger.info(f"   Inactive user threshold: {Config.INACTIVE_USER_DAYS} days")
    logger.info(f"   CORS origins: {len(Config.CORS_ORIGINS)} configured")

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    logger.info("Shutting down...")
    set_repositories(None, None)
    app.state.connection = None
    connection.close()


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

app = FastAPI(
    title="Climate Data API",
    description="""
## Overview

Climate sensor readings and user accounts, stored in MongoDB.

## Authentication

Every write endpoint needs an API key belonging to a **Teacher** account:

- Climate endpoints and `CreateUser` / `UpdateRole`: `?apiKey=<key>`
- `DELETE /api/user/...`: `apiKey: <key>` header

Missing, unknown or under-privileged keys get a **401**.
    """,
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_methods=Config.CORS_METHODS,
    allow_headers=["*"],
)


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(climate_router)
app.include_router(users_router)


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get(
    "/",
    summary="API Information",
    description="Get basic API information and available endpoints."
)
async def root():
    """Root endpoint with API overview."""
    return {
        "name": "Climate Data API",
        "version": VERSION,
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        },
        "endpoints": {
            "climate": {
                "get": "GET /api/climate/{id}",
                "max_precipitation": "GET /api/climate/GetMaxPrecipitation",
                "by_time_and_place": "GET /api/climate/GetValuesByTimeAndPlace",
                "max_temperatures": "GET /api/climate/GetMaxTemperatures",
                "create": "POST /api/climate",
                "create_many": "POST /api/climate/CreateManyRecords",
                "replace": "PUT /api/climate/{id}",
                "update_precipitation": "PATCH /api/climate/{id}"
            },
            "user": {
                "create": "POST /api/user/CreateUser",
                "delete": "DELETE /api/user/{id}",
                "delete_inactive": "DELETE /api/user/DeleteInactiveUsers",
                "update_role": "PATCH /api/user/UpdateRole"
            }
        }
    }


@app.get(
    "/health",
    summary="Health Check",
    description="Check if the backend is running and can reach MongoDB."
)
def health(request: Request):
    """Health check endpoint. Never raises; reports 'degraded' instead."""
    connection = getattr(request.app.state, "connection", None)
    database_ok = connection is not None and connection.ping()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": Config.MONGO_DATABASE_NAME,
        "database_reachable": database_ok
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)
