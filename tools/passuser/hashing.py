"""Password hashing primitive.

bcrypt is slow on purpose, so every call runs in the default thread pool
executor to keep the event loop free.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from functools import cached_property

import bcrypt

# Fixed bcrypt work factor; not configurable per call.
HASH_ROUNDS = 10

# bcrypt only reads this many bytes; longer input is truncated, not rejected.
BCRYPT_MAX_BYTES = 72


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class Hasher(ABC):
    """Adaptive hash used to produce and check password digests."""

    @abstractmethod
    async def hash(self, password: str) -> str:
        """Return a fresh salted digest for ``password``."""

    @abstractmethod
    async def compare(self, password: str, digest: str) -> bool:
        """Return True if ``password`` matches ``digest``."""

    @property
    @abstractmethod
    def dummy_digest(self) -> str:
        """A valid digest compared against when no account exists."""


class BcryptHasher(Hasher):
    """bcrypt hasher with ``HASH_ROUNDS`` rounds and a new salt per digest."""

    async def hash(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._hash_sync, password)

    async def compare(self, password: str, digest: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._compare_sync, password, digest)

    @cached_property
    def dummy_digest(self) -> str:
        return self._hash_sync("dummy")

    @staticmethod
    def _hash_sync(password: str) -> str:
        return bcrypt.hashpw(
            _secret(password), bcrypt.gensalt(rounds=HASH_ROUNDS)
        ).decode("utf-8")

    @staticmethod
    def _compare_sync(password: str, digest: str) -> bool:
        return bcrypt.checkpw(_secret(password), digest.encode("utf-8"))


default_hasher = BcryptHasher()
