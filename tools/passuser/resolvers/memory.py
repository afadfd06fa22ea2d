"""In-memory resolver backed by a plain list of dicts.

Records match a lookup when every lookup field is equal. There is no
uniqueness constraint, so concurrent registrations of one identity can both
succeed here. Useful for tests and for showing that race.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Dict, List, Optional

from ..errors import UserNotFoundError
from ..resolver import Lookup, Resolver


class MemoryResolver(Resolver):
    """List-backed resolver.

    Args:
        users: Optional initial records. The list is used as-is, not copied.
    """

    def __init__(self, users: Optional[List[Dict[str, Any]]] = None) -> None:
        self.users: List[Dict[str, Any]] = users if users is not None else []

    def _match(self, lookup: Lookup) -> Optional[Dict[str, Any]]:
        for user in self.users:
            if all(user.get(k) == v for k, v in lookup.items()):
                return user
        return None

    async def find(self, lookup: Lookup) -> Optional[Dict[str, Any]]:
        await asyncio.sleep(0)
        user = self._match(lookup)
        return copy.deepcopy(user) if user is not None else None

    async def insert(self, record: Dict[str, Any]) -> None:
        await asyncio.sleep(0)
        self.users.append(dict(record))

    async def update_hash(self, lookup: Lookup, digest: str) -> None:
        await asyncio.sleep(0)
        user = self._match(lookup)
        if user is None:
            raise UserNotFoundError()
        user["password"] = digest
