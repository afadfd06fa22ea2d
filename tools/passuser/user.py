"""Identity handle bound to one (resolver, realm, username).

Usage::

    user = User(resolver, "foo", realm="staff")
    await user.register("secr3t")
    user.digest          # bcrypt digest of the stored record
    await user.verify_password("secr3t")  # True

The handle caches the last record it fetched. The cache is a point-in-time
copy, not a live view of storage.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Awaitable, Mapping, Optional

from . import credentials
from .credentials import Options
from .hashing import Hasher, default_hasher
from .records import CredentialRecord
from .resolver import Resolver
from .validation import DEFAULT_REALM, check_args

logger = logging.getLogger(__name__)


class User:
    """Client-side projection of one account.

    Args:
        resolver: Storage backend providing find, insert and update_hash.
        username: Account name, 2-128 characters.
        realm: Realm the account belongs to. Defaults to ``"_default"``.
        debug: Log each step at DEBUG level.
        hide: Suppress error logging. Errors are still raised.
        hasher: Hash primitive override, mainly for tests.

    Raises:
        TypeError: An argument has the wrong type.
        ValueError: username or realm length is out of range.
    """

    def __init__(
        self,
        resolver: Resolver,
        username: str,
        realm: str = DEFAULT_REALM,
        *,
        debug: bool = False,
        hide: bool = False,
        hasher: Optional[Hasher] = None,
    ) -> None:
        check_args(resolver, username, realm=realm)
        if not isinstance(debug, bool):
            raise TypeError("debug must be a boolean")
        if not isinstance(hide, bool):
            raise TypeError("hide must be a boolean")

        self._resolver = resolver
        self._username = username
        self._realm = realm
        self._options = Options(debug, hide, hasher or default_hasher)
        self._record: Optional[CredentialRecord] = None

    def __repr__(self) -> str:
        return (
            f"User(realm={self._realm!r}, username={self._username!r}, "
            f"populated={self.populated})"
        )

    @property
    def username(self) -> str:
        return self._username

    @property
    def realm(self) -> str:
        return self._realm

    @property
    def populated(self) -> bool:
        """True once a record has been fetched."""
        return self._record is not None

    @property
    def record(self) -> Optional[CredentialRecord]:
        """Last fetched record, including the raw digest. For trusted code."""
        return self._record

    @property
    def digest(self) -> Optional[str]:
        return self._record.password if self._record else None

    @property
    def fields(self) -> Mapping[str, Any]:
        """Read-only view of the caller-defined fields of the cached record."""
        if self._record is None:
            return MappingProxyType({})
        return MappingProxyType(self._record.fields)

    def _merge(self, record: Optional[CredentialRecord]) -> Optional[CredentialRecord]:
        # A miss leaves an existing cache untouched.
        if record is not None:
            self._record = record
            self._realm = record.realm
            self._username = record.username
        return record

    async def find(self) -> Optional[CredentialRecord]:
        """Fetch the record and cache it on the handle.

        Returns:
            The record, or None if the identity does not exist.
        """
        record = await credentials._find(
            self._resolver, self._username, self._realm, self._options
        )
        return self._merge(record)

    refresh = find

    async def exists(self) -> bool:
        return await credentials._exists(
            self._resolver, self._username, self._realm, self._options
        )

    def verify_password(self, password: str) -> Awaitable[bool]:
        """Return an awaitable resolving to True if ``password`` is correct."""
        check_args(
            self._resolver,
            self._username,
            password,
            self._realm,
            check_password_length=False,
        )
        return credentials._verify_password(
            self._resolver, self._username, password, self._realm, self._options
        )

    def set_password(self, password: str) -> Awaitable[None]:
        """Store a fresh digest for ``password``. The identity must exist."""
        check_args(self._resolver, self._username, password, self._realm)
        return credentials._set_password(
            self._resolver, self._username, password, self._realm, self._options
        )

    def register(self, password: str) -> Awaitable[Optional[CredentialRecord]]:
        """Register this identity and cache the stored record."""
        check_args(self._resolver, self._username, password, self._realm)
        return self._register(password)

    async def _register(self, password: str) -> Optional[CredentialRecord]:
        record = await credentials._register(
            self._resolver, self._username, password, self._realm, self._options
        )
        if self._options.debug:
            logger.debug(f"[passuser] registered {self!r}")
        return self._merge(record)
