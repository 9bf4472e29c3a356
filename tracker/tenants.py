"""
Tenant resolution: maps a declared user type, or a username/password pair,
to the storage key of that tenant's progress document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Protocol

from tracker.errors import AuthenticationFailed, InvalidTenant, MalformedBody

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    username: str
    user_type: str

    def as_dict(self) -> dict:
        return {"username": self.username, "userType": self.user_type}


class CredentialStore(Protocol):
    """Exact-match account lookup."""

    def find(self, username: str, password: str) -> Optional[Identity]:
        ...


def parse_account(record: dict) -> tuple[str, str, str]:
    """Validate one configured login account as (username, password, user type)."""
    username = record.get("username")
    password = record.get("password")
    user_type = record.get("userType") or record.get("user_type")
    if not username or not password or not user_type:
        raise ValueError(
            f"Account {username!r} needs a username, password and userType"
        )
    return username, password, user_type


@dataclass
class InMemoryCredentialStore:
    """Accounts held in memory, keyed by username."""

    accounts: dict = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "InMemoryCredentialStore":
        store = cls()
        for record in records:
            store.add_user(*parse_account(record))
        return store

    def add_user(self, username: str, password: str, user_type: str) -> None:
        self.accounts[username] = (password, user_type)

    def find(self, username: str, password: str) -> Optional[Identity]:
        account = self.accounts.get(username)
        if account is None or account[0] != password:
            return None
        return Identity(username=username, user_type=account[1])


class TenantResolver:
    """
    Resolves tenants against a closed set of user types.

    When `default_tenant` is set (single-tenant mode) a request that declares
    no user type lands on that tenant instead of failing.
    """

    def __init__(
        self,
        tenants: Iterable[str],
        credentials: CredentialStore,
        default_tenant: Optional[str] = None,
    ):
        self.tenants = frozenset(tenants)
        self.credentials = credentials
        self.default_tenant = default_tenant

    def is_default(self, key: str) -> bool:
        return self.default_tenant is not None and key == self.default_tenant

    def resolve_storage_key(self, user_type: Optional[str]) -> str:
        if not user_type:
            if self.default_tenant is not None:
                return self.default_tenant
            raise InvalidTenant("User type required")
        if user_type not in self.tenants:
            raise InvalidTenant("Invalid user type")
        return user_type

    def authenticate(self, username: Optional[str], password: Optional[str]) -> Identity:
        if not username or not password:
            raise MalformedBody("Username and password required")
        identity = self.credentials.find(username, password)
        if identity is None:
            logger.info("Failed login for %s", username)
            raise AuthenticationFailed()
        return identity

    def resolve_credentials(
        self, username: Optional[str], password: Optional[str]
    ) -> str:
        identity = self.authenticate(username, password)
        return self.resolve_storage_key(identity.user_type)
