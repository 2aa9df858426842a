"""
Models Package
==============

All the data models live here.
Import from here instead of the individual files.

Example:
    from climate_api.models import ClimateReading, UserRole, OperationResult
"""

from .result import OperationResult

from .climate import (
    # Stored readings and what clients send to create them
    ReadingKeys,
    RecordCreated,
    ClimateReading,

    # Query filters
    DataFilter,

    # What we send back for the special lookups
    MaxPrecipitation,
    TimeAndPlaceValues,
    NameTimeTemp,
)

from .user import (
    UserRole,
    AccountKeys,
    UserAccount,
    CreateUserRequest,
)

__all__ = [
    "OperationResult",
    "ReadingKeys",
    "RecordCreated",
    "ClimateReading",
    "DataFilter",
    "MaxPrecipitation",
    "TimeAndPlaceValues",
    "NameTimeTemp",
    "UserRole",
    "AccountKeys",
    "UserAccount",
    "CreateUserRequest",
]
