"""
Router Dependencies
===================

Shared bits every router needs:

1. The repositories (injected once at startup, like a manager handed to
   the reception desk)
2. The authorization gate used by every write endpoint
3. A couple of helpers for turning results/errors into responses

AUTHORIZATION GATE:
------------------
    @router.post("")
    def create_record(..., caller: UserAccount = Depends(require_role(UserRole.TEACHER))):

The gate looks up the caller's API key, checks their role ranks high enough,
refreshes their last access time and hands back the account. Anything else
is a 401, which is deliberately different from 400 and 404.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query
from fastapi.responses import JSONResponse

from climate_api.models import OperationResult, UserAccount, UserRole

logger = logging.getLogger(__name__)


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================

_climate_repository = None  # These get set when the app starts
_user_repository = None


def set_repositories(climate_repository, user_repository):
    """Called when the app starts to hand the routers their repositories."""
    global _climate_repository, _user_repository
    _climate_repository = climate_repository
    _user_repository = user_repository


def get_climate_repository():
    if _climate_repository is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _climate_repository


def get_user_repository():
    if _user_repository is None:
        raise HTTPException(status_code=500, detail="Server not fully started yet")
    return _user_repository


# =============================================================================
# AUTHORIZATION
# =============================================================================

def authorize(users, api_key: Optional[str], role: UserRole) -> UserAccount:
    """
    Let the caller in or raise 401.

    Args:
        users: UserRepository
        api_key: Key sent by the caller (may be missing)
        role: Least privileged role allowed through

    Returns:
        The caller's account, with last access refreshed in the database

    Raises:
        HTTPException: 401 if the key is missing/unknown/not privileged enough,
            500 if the lookup itself failed (database error, unreadable account)
    """
    try:
        account = users.authenticate(api_key, role)
        if account is None:
            logger.warning(f"Rejected API key for a {role.label} endpoint")
            raise HTTPException(status_code=401, detail="Unauthorized")
        users.update_login_time(api_key, datetime.now(timezone.utc))
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("authenticate caller", e)
    return account


def require_role(role: UserRole):
    """Gate for endpoints that take the key as ?apiKey=..."""
    def gate(
        api_key: Optional[str] = Query(None, alias="apiKey", description="Caller's API key"),
        users=Depends(get_user_repository),
    ) -> UserAccount:
        return authorize(users, api_key, role)
    return gate


def require_role_header(role: UserRole):
    """Gate for endpoints that take the key in an `apiKey` header."""
    def gate(
        api_key: Optional[str] = Header(None, alias="apiKey", description="Caller's API key"),
        users=Depends(get_user_repository),
    ) -> UserAccount:
        return authorize(users, api_key, role)
    return gate


# =============================================================================
# RESPONSE HELPERS
# =============================================================================

def server_error(action: str, error: Exception) -> HTTPException:
    """Log an unexpected failure and build the 500 that reports it."""
    logger.error(f"Failed to {action}: {error}", exc_info=True)
    return HTTPException(status_code=500, detail=str(error))


def operation_response(result: OperationResult):
    """The result itself on success, or a 400 whose body is the result."""
    if result.success:
        return result
    return JSONResponse(status_code=400, content=result.model_dump(mode="json"))
