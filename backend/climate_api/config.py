"""
Configuration
=============

Everything tunable comes from environment variables. A local `.env` file is
loaded first, so for development you can just:

    cp env.example.txt .env
    # edit .env
"""

import os

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        MONGO_CONNECTION_STRING: MongoDB connection string
        MONGO_DATABASE_NAME: Database holding ClimateData and UserAccounts
        MONGO_SERVER_SELECTION_TIMEOUT_MS: Give up finding a server after this long
        MONGO_CONNECT_TIMEOUT_MS: Give up opening a socket after this long
        MONGO_SOCKET_TIMEOUT_MS: Give up waiting on a query after this long
        MONGO_MAX_POOL_SIZE: Connections kept in the shared pool
        PRECIPITATION_LOOKBACK_MONTHS: Window for GetMaxPrecipitation (default: 50)
        INACTIVE_USER_DAYS: Staleness threshold for DeleteInactiveUsers (default: 30)
        CORS_ORIGINS: Comma separated list of allowed origins
        LOG_LEVEL: Root log level (default: INFO)
        PORT: Port used when running this module directly

    Defaults are set for a local MongoDB on the standard port.
    """

    # MongoDB
    MONGO_CONNECTION_STRING = os.getenv("MONGO_CONNECTION_STRING", "mongodb://localhost:27017")
    MONGO_DATABASE_NAME = os.getenv("MONGO_DATABASE_NAME", "ClimateDataDB")

    # Driver timeouts and pool size. Nothing is retried, so these bound how
    # long a single request can hang on the database.
    MONGO_SERVER_SELECTION_TIMEOUT_MS = int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    MONGO_CONNECT_TIMEOUT_MS = int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "5000"))
    MONGO_SOCKET_TIMEOUT_MS = int(os.getenv("MONGO_SOCKET_TIMEOUT_MS", "10000"))
    MONGO_MAX_POOL_SIZE = int(os.getenv("MONGO_MAX_POOL_SIZE", "50"))

    # GetMaxPrecipitation window. This endpoint has always looked back 50
    # months even though the docs say "five months"; see DESIGN.md.
    PRECIPITATION_LOOKBACK_MONTHS = int(os.getenv("PRECIPITATION_LOOKBACK_MONTHS", "50"))

    # Students not seen for this many days are "inactive"
    INACTIVE_USER_DAYS = int(os.getenv("INACTIVE_USER_DAYS", "30"))

    # Allowed CORS origins
    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "https://www.google.com.au,https://www.google.com"))
    CORS_METHODS = ["GET", "PUT", "POST", "PATCH", "DELETE"]

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    PORT = int(os.getenv("PORT", "8000"))
