"""
Services Package
================

These do the actual talking to MongoDB.

- MongoConnection: The one shared MongoClient
- ClimateRepository: Climate readings ("ClimateData")
- UserRepository: User accounts and API key checks ("UserAccounts")
"""

from .mongo_connection import MongoConnection
from .climate_repository import ClimateRepository
from .user_repository import UserRepository

__all__ = [
    "MongoConnection",
    "ClimateRepository",
    "UserRepository",
]
