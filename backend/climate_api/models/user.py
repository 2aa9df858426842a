"""
User Models
===========
Pydantic models for the "UserAccounts" collection, plus the role ladder.

ROLES:
-----
Roles are ranked. A LOWER rank means MORE privilege:

    Teacher = 0   (can write readings, manage accounts)
    Student = 1   (read-only)

A caller passes an authorization check when their rank is less than or
equal to the rank the endpoint requires. A Student (1) hitting a Teacher (0)
endpoint is rejected because 1 > 0.

Roles are stored as plain strings ("Teacher", "Student"). A stored role that
isn't one of those names can't be ranked, so that account never passes an
authorization check.
"""

from datetime import datetime
from enum import IntEnum
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from climate_api.utils.validation import validate_email


# =============================================================================
# ROLES
# =============================================================================

class UserRole(IntEnum):
    """Ordered roles. Lower value = higher privilege."""
    TEACHER = 0
    STUDENT = 1

    @property
    def label(self) -> str:
        """Name as stored in MongoDB ("Teacher")."""
        return self.name.title()

    @classmethod
    def parse(cls, value) -> Optional["UserRole"]:
        """
        Turn a stored role name into a UserRole.

        Returns None for anything that isn't an exact role name, which callers
        treat as "not authorised".
        """
        if isinstance(value, cls):
            return value
        for role in cls:
            if role.label == value:
                return role
        return None

    def permits(self, required: "UserRole") -> bool:
        """True if this role is at least as privileged as `required`."""
        return self <= required


# =============================================================================
# DOCUMENT KEYS
# =============================================================================

class AccountKeys:
    """MongoDB keys of a user account document."""
    ID = "_id"
    NAME = "Name"
    ACTIVE = "Active"
    EMAIL = "Email"
    ROLE = "Role"
    LAST_ACCESS = "Last Access"
    API_KEY = "ApiKey"


# =============================================================================
# ACCOUNTS
# =============================================================================

class UserAccount(BaseModel):
    """
    A stored user account.

    The api_key is generated once when the account is created and is the only
    credential the API accepts. It never rotates or expires.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, alias=AccountKeys.ID, description="MongoDB ObjectId (hex)")
    name: Optional[str] = Field(None, alias=AccountKeys.NAME)
    active: bool = Field(True, alias=AccountKeys.ACTIVE)
    email: Optional[str] = Field(None, alias=AccountKeys.EMAIL)
    role: Optional[str] = Field(None, alias=AccountKeys.ROLE, description="Teacher | Student")
    last_access: Optional[datetime] = Field(None, alias=AccountKeys.LAST_ACCESS)
    api_key: Optional[str] = Field(None, alias=AccountKeys.API_KEY)

    @field_validator("id", mode="before")
    @classmethod
    def _object_id_to_str(cls, value):
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @classmethod
    def from_document(cls, document: dict) -> "UserAccount":
        return cls.model_validate(document)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"id"})


class CreateUserRequest(BaseModel):
    """
    Request body for POST /api/user/CreateUser.

    Example Request:
        {
            "name": "Jo Bloggs",
            "email": "jo.bloggs@example.edu",
            "role": "Student",
            "active": true
        }
    """
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., description="Must not already be on file")
    role: str = Field(UserRole.STUDENT.label, description="Teacher | Student")
    active: bool = Field(True)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        if not validate_email(value):
            raise ValueError("That doesn't look like a valid email address")
        return value.strip()

    @field_validator("role")
    @classmethod
    def _check_role(cls, value: str) -> str:
        if UserRole.parse(value) is None:
            raise ValueError(f"Unknown role '{value}'. Expected one of: {', '.join(r.label for r in UserRole)}")
        return value

    def to_account(self) -> UserAccount:
        return UserAccount(name=self.name, email=self.email, role=self.role, active=self.active)
