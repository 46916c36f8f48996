"""In-memory account directory.

Stands in for the user table of the marketplace: one email can own a renter
account, a landlord account, or both. Only the data the auth routes need is
kept (no credentials).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from rental_api.core.errors import ValidationAppError

logger = logging.getLogger(__name__)


class AccountType(str, Enum):
    RENTER = "RENTER"
    LANDLORD = "LANDLORD"


@dataclass(frozen=True)
class Account:
    email: str
    first_name: str
    last_name: str
    account_type: AccountType


@dataclass(frozen=True)
class AccountLookup:
    """Which account types exist for an email."""

    has_renter: bool
    has_landlord: bool
    account_count: int


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountDirectory:
    """Thread-safe mapping of email -> accounts, one per account type."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[str, dict[AccountType, Account]] = {}

    def lookup(self, email: str) -> AccountLookup:
        with self._lock:
            accounts = self._accounts.get(normalize_email(email), {})
            return AccountLookup(
                has_renter=AccountType.RENTER in accounts,
                has_landlord=AccountType.LANDLORD in accounts,
                account_count=len(accounts),
            )

    def register(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        account_type: AccountType,
    ) -> Account:
        """Create an account for the email and account type.

        Raises:
            ValidationAppError: If the email already has this account type.
        """

        key = normalize_email(email)
        account = Account(
            email=key,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            account_type=account_type,
        )

        with self._lock:
            accounts = self._accounts.setdefault(key, {})
            if account_type in accounts:
                raise ValidationAppError(
                    code="account_exists",
                    message="User with this email already exists",
                    details={"account_type": account_type.value},
                )
            accounts[account_type] = account

        logger.info(
            "account.registered",
            extra={"account_type": account_type.value},
        )
        return account
