"""
Operation Result
================

Every write we send to MongoDB comes back to the caller as one of these,
so the routers can decide between 200 and 400 without catching anything.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class OperationResult(BaseModel):
    """
    Outcome of a mutating repository call.

    Fields:
        message: Human-readable summary ("Record replaced successfully")
        success: Whether the write did what was asked
        records_affected: How many documents were inserted/modified/deleted
        value: Optional payload (new ids, the created account, ...)
    """
    message: str = Field("", description="Summary of what happened")
    success: bool = Field(True, description="Whether the operation succeeded")
    records_affected: int = Field(0, ge=0, description="Documents touched")
    value: Optional[Any] = Field(None, description="Optional payload")

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        """Shortcut for a result that touched nothing."""
        return cls(message=message, success=False, records_affected=0)
