"""
Utility modules for the climate data API.
"""

from climate_api.utils.validation import (
    validate_object_id,
    parse_object_id,
    validate_email,
    months_before,
)

__all__ = [
    "validate_object_id",
    "parse_object_id",
    "validate_email",
    "months_before",
]
