"""Input checks that run before any I/O.

Every check raises immediately: ``TypeError`` for a wrong type and
``ValueError`` for an out-of-range length. The order is fixed so the same bad
input always produces the same message:

    resolver type → username type → password type → realm type →
    callback type → username length → password length → realm length
"""

from typing import Any

from .resolver import RESOLVER_METHODS

DEFAULT_REALM = "_default"

USERNAME_MIN = 2
USERNAME_MAX = 128
PASSWORD_MIN = 6
REALM_MIN = 1
REALM_MAX = 128


class _Missing:
    """Marker for an argument the caller did not ask to validate."""

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return f"<{self._name}>"


NO_PASSWORD = _Missing("no password")
NO_CALLBACK = _Missing("no callback")


def check_args(
    resolver: Any,
    username: Any,
    password: Any = NO_PASSWORD,
    realm: Any = DEFAULT_REALM,
    callback: Any = NO_CALLBACK,
    check_password_length: bool = True,
) -> None:
    """Validate operation arguments.

    Args:
        resolver: Storage resolver; must provide find, insert and update_hash.
        username: Account name, 2-128 characters.
        password: Plaintext password, or ``NO_PASSWORD`` to skip the check.
        realm: Realm name, 1-128 characters.
        callback: Completion callback, or ``NO_CALLBACK`` to skip the check.
        check_password_length: Enforce the 6 character minimum. Verification
            passes False so a short wrong password is just a wrong password.
    """
    if not all(callable(getattr(resolver, name, None)) for name in RESOLVER_METHODS):
        raise TypeError("resolver must provide find, insert and update_hash")
    if not isinstance(username, str):
        raise TypeError("username must be a string")
    if password is not NO_PASSWORD and not isinstance(password, str):
        raise TypeError("password must be a string")
    if not isinstance(realm, str):
        raise TypeError("realm must be a string")
    if callback is not NO_CALLBACK and not callable(callback):
        raise TypeError("callback must be callable")

    if len(username) < USERNAME_MIN:
        raise ValueError(f"username must be at least {USERNAME_MIN} characters")
    if len(username) > USERNAME_MAX:
        raise ValueError(f"username can not exceed {USERNAME_MAX} characters")
    if (
        password is not NO_PASSWORD
        and check_password_length
        and len(password) < PASSWORD_MIN
    ):
        raise ValueError(f"password must be at least {PASSWORD_MIN} characters")
    if len(realm) < REALM_MIN:
        raise ValueError(f"realm must be at least {REALM_MIN} character")
    if len(realm) > REALM_MAX:
        raise ValueError(f"realm can not exceed {REALM_MAX} characters")
