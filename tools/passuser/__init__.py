"""
passuser — Username/password accounts over pluggable storage

Creates, authenticates and updates bcrypt-hashed credentials without tying
the application to a storage engine.

Architecture:
    caller → validation → credentials → Resolver (find / insert / update_hash)
                                      → Hasher   (hash / compare)

Components:
    - credentials: Stateless operations taking the resolver on every call
    - User: Identity handle bound to one (resolver, realm, username)
    - callbacks: ``callback(err, result)`` wrappers for the same operations
    - Resolver: Abstract storage interface supplied by the host application
    - resolvers: In-memory and SQLite reference backends

Usage:
    from passuser import User
    from passuser.resolvers import SQLiteResolver

    user = User(SQLiteResolver(".passuser/users.db"), "owl")
    await user.register("password123")
    await user.verify_password("password123")  # True
"""

__version__ = "0.1.0"

from .credentials import exists, find, register, set_password, verify_password
from .errors import (
    IllegalRecordError,
    PassUserError,
    UserExistsError,
    UserNotFoundError,
)
from .hashing import HASH_ROUNDS, BcryptHasher, Hasher
from .records import CredentialRecord, found
from .resolver import Lookup, Resolver
from .user import User
from .validation import DEFAULT_REALM

__all__ = [
    "DEFAULT_REALM",
    "HASH_ROUNDS",
    "BcryptHasher",
    "CredentialRecord",
    "Hasher",
    "IllegalRecordError",
    "Lookup",
    "PassUserError",
    "Resolver",
    "User",
    "UserExistsError",
    "UserNotFoundError",
    "exists",
    "find",
    "found",
    "register",
    "set_password",
    "verify_password",
]
