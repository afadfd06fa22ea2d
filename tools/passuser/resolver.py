"""Storage resolver interface.

The host application supplies the storage. passuser only talks to it through
three coroutines, so any engine (a list, a document store, a SQL table) can
back it. Concrete resolvers may inherit from ``Resolver``, define the three
methods on their own class, or be a plain bundle of callables such as a
``SimpleNamespace``; argument validation only checks the instance.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypedDict

RESOLVER_METHODS = ("find", "insert", "update_hash")


class Lookup(TypedDict):
    """Identity key passed to find and update_hash."""

    realm: str
    username: str


class Resolver(ABC):
    """Abstract storage backend for credential records.

    Architecture:
        credentials.register() → find() → insert() → update_hash() → find()
    """

    @abstractmethod
    async def find(self, lookup: Lookup) -> Optional[Dict[str, Any]]:
        """Return the record matching ``lookup``, or None.

        The record is a mapping holding at least ``realm`` and ``username``
        and, once a password is set, the digest under ``password``.
        """

    @abstractmethod
    async def insert(self, record: Dict[str, Any]) -> None:
        """Store a new record.

        May raise if a uniqueness constraint on (realm, username) is violated.
        """

    @abstractmethod
    async def update_hash(self, lookup: Lookup, digest: str) -> None:
        """Replace the digest of the matching record.

        Must raise (``UserNotFoundError`` for the bundled resolvers) when no
        record matches.
        """

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is Resolver:
            if all(
                callable(getattr(subclass, name, None))
                for name in RESOLVER_METHODS
            ):
                return True
        return NotImplemented
