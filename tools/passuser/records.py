"""Typed credential records and the checks applied when reading them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import IllegalRecordError
from .resolver import Lookup

# Stored keys that map onto typed CredentialRecord attributes.
RESERVED_KEYS = frozenset({"realm", "username", "password"})

# Stored keys that would collide with identity handle state.
ILLEGAL_KEYS = frozenset(
    {
        "digest",
        "fields",
        "record",
        "resolver",
        "hasher",
        "options",
        "populated",
    }
)


@dataclass
class CredentialRecord:
    """A stored account.

    Attributes:
        realm: Realm the account belongs to.
        username: Account name, unique within the realm.
        password: Digest produced by the hasher; None until a password is set.
        fields: Caller-defined extra fields stored alongside the identity.
    """

    realm: str
    username: str
    password: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Any, lookup: Lookup) -> CredentialRecord:
        """Build a record from what a resolver returned for ``lookup``.

        Raises:
            IllegalRecordError: ``raw`` is not a mapping, contains an illegal
                key, or names a different identity than ``lookup``.
        """
        if not isinstance(raw, Mapping):
            raise IllegalRecordError(
                f"resolver returned {type(raw).__name__}, expected a mapping"
            )

        for key in raw:
            if not isinstance(key, str) or key.startswith("_") or key in ILLEGAL_KEYS:
                raise IllegalRecordError(key=str(key))

        for key in ("realm", "username"):
            if key in raw and raw[key] != lookup[key]:
                raise IllegalRecordError(
                    f"object in user db has {key} {raw[key]!r}, expected {lookup[key]!r}",
                    key=key,
                )

        password = raw.get("password")
        if password is not None and not isinstance(password, str):
            raise IllegalRecordError("password digest must be a string", key="password")

        return cls(
            realm=lookup["realm"],
            username=lookup["username"],
            password=password,
            fields={k: v for k, v in raw.items() if k not in RESERVED_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flatten back into the stored shape."""
        out: Dict[str, Any] = dict(self.fields)
        out["realm"] = self.realm
        out["username"] = self.username
        if self.password is not None:
            out["password"] = self.password
        return out


def found(record: Optional[CredentialRecord]) -> bool:
    """Boolean view of a find result."""
    return record is not None
