"""
User API Router
===============

Endpoints for managing user accounts. Every one of them needs a Teacher key.

ALL ENDPOINTS:
-------------
POST   /api/user/CreateUser?apiKey=              - Create an account
DELETE /api/user/DeleteInactiveUsers             - Delete inactive students  (apiKey header)
DELETE /api/user/{id}                            - Delete one account        (apiKey header)
PATCH  /api/user/UpdateRole?newRole=&apiKey=     - Change roles in bulk
                  &createdFrom=&createdTo=

Creating an account returns it with its new api_key. Hand that key to the
user - it's the only way they can authenticate.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from climate_api.config import Config
from climate_api.models import (
    CreateUserRequest,
    DataFilter,
    OperationResult,
    UserAccount,
    UserRole,
)
from climate_api.routers.dependencies import (
    get_user_repository,
    operation_response,
    require_role,
    require_role_header,
    server_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post(
    "/CreateUser",
    response_model=OperationResult,
    status_code=201,
)
def create_user(
    user: CreateUserRequest,
    caller: UserAccount = Depends(require_role(UserRole.TEACHER)),
    repository=Depends(get_user_repository),
):
    """
    Create a new user account.

    Emails must be unique - a duplicate email gets a 400 and nothing is
    stored. The response `value` is the new account including its api_key.
    """
    try:
        result = repository.create(user.to_account())
    except Exception as e:
        raise server_error("create user", e)
    return operation_response(result)


@router.delete("/DeleteInactiveUsers", response_model=OperationResult)
def delete_inactive_users(
    caller: UserAccount = Depends(require_role_header(UserRole.TEACHER)),
    repository=Depends(get_user_repository),
):
    """
    Delete student accounts that haven't been used for INACTIVE_USER_DAYS
    (30 by default).
    """
    cutoff = datetime.now(timezone.utc) - timedelta(days=Config.INACTIVE_USER_DAYS)
    try:
        result = repository.delete_stale(cutoff)
    except Exception as e:
        raise server_error("delete inactive users", e)
    return operation_response(result)


@router.delete("/{id}", response_model=OperationResult)
def delete_user(
    id: str,
    caller: UserAccount = Depends(require_role_header(UserRole.TEACHER)),
    repository=Depends(get_user_repository),
):
    """Delete one account by id."""
    try:
        result = repository.delete_by_id(id)
    except Exception as e:
        raise server_error("delete user", e)
    return operation_response(result)


@router.patch("/UpdateRole", response_model=OperationResult)
def update_role(
    new_role: str = Query(..., alias="newRole", description="Teacher | Student"),
    created_from: Optional[datetime] = Query(None, alias="createdFrom"),
    created_to: Optional[datetime] = Query(None, alias="createdTo"),
    caller: UserAccount = Depends(require_role(UserRole.TEACHER)),
    repository=Depends(get_user_repository),
):
    """
    Change the role of every account last seen between ?createdFrom= and
    ?createdTo=. Leave both out to change every account.
    """
    role = UserRole.parse(new_role)
    if role is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown role '{new_role}'. Expected one of: {', '.join(r.label for r in UserRole)}",
        )

    try:
        result = repository.update_role(DataFilter(created_from=created_from, created_to=created_to), role)
    except Exception as e:
        raise server_error("update roles", e)
    return operation_response(result)
