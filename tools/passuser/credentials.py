"""Credential operations: find, exists, verify_password, set_password, register.

Each public function validates its arguments synchronously and returns a
coroutine, so a programming error raises at call time rather than when the
result is awaited::

    record = await credentials.register(resolver, "foo", "secr3t")
    await credentials.verify_password(resolver, "foo", "secr3t")  # True

No state is kept between calls; all durable state lives in the resolver.

Registration is check-then-insert and is not atomic. Two concurrent
registrations of the same (realm, username) can both pass the existence
check. Only a uniqueness constraint in the resolver closes that race.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Optional

from .errors import IllegalRecordError, UserExistsError
from .hashing import Hasher, default_hasher
from .records import CredentialRecord
from .resolver import Lookup, Resolver
from .validation import DEFAULT_REALM, check_args

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Options:
    """Per-call settings.

    Attributes:
        debug: Log each step at DEBUG level.
        hide: Do not log errors. The error is still raised.
        hasher: Hash primitive; bcrypt unless a test swaps it.
    """

    debug: bool = False
    hide: bool = False
    hasher: Hasher = field(default=default_hasher, repr=False)


def _lookup(realm: str, username: str) -> Lookup:
    return {"realm": realm, "username": username}


def _log_debug(opts: Options, msg: str) -> None:
    if opts.debug:
        logger.debug(f"[passuser] {msg}")


def _log_error(opts: Options, msg: str) -> None:
    if not opts.hide:
        logger.error(f"[passuser] {msg}")


async def _find(
    resolver: Resolver, username: str, realm: str, opts: Options
) -> Optional[CredentialRecord]:
    lookup = _lookup(realm, username)
    _log_debug(opts, f"find realm={realm!r} username={username!r}")

    raw = await resolver.find(lookup)
    if not raw:
        return None

    try:
        return CredentialRecord.from_mapping(raw, lookup)
    except IllegalRecordError as exc:
        _log_error(opts, f"{exc} (key={exc.key!r}, realm={realm!r}, username={username!r})")
        raise


async def _exists(
    resolver: Resolver, username: str, realm: str, opts: Options
) -> bool:
    return await _find(resolver, username, realm, opts) is not None


async def _verify_password(
    resolver: Resolver, username: str, password: str, realm: str, opts: Options
) -> bool:
    record = await _find(resolver, username, realm, opts)

    if record is None or record.password is None:
        # Burn a comparison so a missing account costs the same as a bad password.
        await opts.hasher.compare(password, opts.hasher.dummy_digest)
        _log_debug(opts, f"verify realm={realm!r} username={username!r}: no digest")
        return False

    ok = await opts.hasher.compare(password, record.password)
    _log_debug(opts, f"verify realm={realm!r} username={username!r}: {ok}")
    return ok


async def _set_password(
    resolver: Resolver, username: str, password: str, realm: str, opts: Options
) -> None:
    digest = await opts.hasher.hash(password)
    _log_debug(opts, f"update_hash realm={realm!r} username={username!r}")
    await resolver.update_hash(_lookup(realm, username), digest)


async def _register(
    resolver: Resolver, username: str, password: str, realm: str, opts: Options
) -> Optional[CredentialRecord]:
    if await _exists(resolver, username, realm, opts):
        _log_debug(opts, f"register realm={realm!r} username={username!r}: exists")
        raise UserExistsError()

    _log_debug(opts, f"insert realm={realm!r} username={username!r}")
    await resolver.insert(_lookup(realm, username))

    try:
        await _set_password(resolver, username, password, realm, opts)
    except Exception as exc:
        # The bare record stays behind; re-registration now fails until an
        # administrator removes it.
        _log_error(
            opts,
            f"register realm={realm!r} username={username!r}: inserted but "
            f"setting the password failed: {exc}",
        )
        raise

    return await _find(resolver, username, realm, opts)


def find(
    resolver: Resolver,
    username: str,
    realm: str = DEFAULT_REALM,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> Awaitable[Optional[CredentialRecord]]:
    """Look up an identity.

    Returns:
        Awaitable resolving to the CredentialRecord, or None when the
        identity does not exist. Use ``records.found`` for a boolean view.

    Raises:
        IllegalRecordError: (when awaited) the resolver returned a record
            with a reserved key or for a different identity.
    """
    check_args(resolver, username, realm=realm)
    return _find(resolver, username, realm, Options(debug, hide, hasher))


def exists(
    resolver: Resolver,
    username: str,
    realm: str = DEFAULT_REALM,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> Awaitable[bool]:
    """Return an awaitable that resolves to True if the identity exists."""
    check_args(resolver, username, realm=realm)
    return _exists(resolver, username, realm, Options(debug, hide, hasher))


def verify_password(
    resolver: Resolver,
    username: str,
    password: str,
    realm: str = DEFAULT_REALM,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> Awaitable[bool]:
    """Check ``password`` against the stored digest.

    A missing identity and a wrong password both resolve to False. Resolver
    and hasher errors propagate unchanged.
    """
    check_args(resolver, username, password, realm, check_password_length=False)
    return _verify_password(
        resolver, username, password, realm, Options(debug, hide, hasher)
    )


def set_password(
    resolver: Resolver,
    username: str,
    password: str,
    realm: str = DEFAULT_REALM,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> Awaitable[None]:
    """Hash ``password`` with a fresh salt and store it.

    Existence is not checked first: the resolver's ``update_hash`` must
    raise when nothing matches, and that error propagates as-is. Nothing is
    written if hashing fails.
    """
    check_args(resolver, username, password, realm)
    return _set_password(
        resolver, username, password, realm, Options(debug, hide, hasher)
    )


def register(
    resolver: Resolver,
    username: str,
    password: str,
    realm: str = DEFAULT_REALM,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> Awaitable[Optional[CredentialRecord]]:
    """Create an identity and set its password.

    Steps: existence check, insert of the bare ``{realm, username}`` record,
    set_password, re-fetch. Each step runs only if the previous one
    succeeded. A failure after the insert is not rolled back.

    Raises:
        UserExistsError: (when awaited) the identity is already registered.
    """
    check_args(resolver, username, password, realm)
    return _register(
        resolver, username, password, realm, Options(debug, hide, hasher)
    )
