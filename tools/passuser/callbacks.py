"""Callback-style wrappers around the credential operations.

For code that prefers ``callback(err, result)`` over awaiting. Each wrapper
validates synchronously, schedules the operation as a task on the running
event loop and calls ``callback`` exactly once when it completes::

    def done(err, ok):
        ...

    callbacks.verify_password(resolver, "foo", "secr3t", "_default", done)

The callback is the last positional argument, so unlike the awaitable API the
realm must be given explicitly; pass ``DEFAULT_REALM`` for the default realm.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine

from . import credentials
from .credentials import Options
from .hashing import Hasher, default_hasher
from .resolver import Resolver
from .validation import check_args

Callback = Callable[[BaseException | None, Any], None]


def _schedule(
    operation: Callable[..., Coroutine[Any, Any, Any]], args: tuple, callback: Callback
) -> asyncio.Task:
    # Fails with RuntimeError outside a running loop, before the coroutine exists.
    loop = asyncio.get_running_loop()
    task = loop.create_task(operation(*args))

    def _done(t: asyncio.Task) -> None:
        if t.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        exc = t.exception()
        if exc is not None:
            callback(exc, None)
        else:
            callback(None, t.result())

    task.add_done_callback(_done)
    return task


def find(
    resolver: Resolver,
    username: str,
    realm: str,
    callback: Callback,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> asyncio.Task:
    """Call back with ``(None, record_or_None)``."""
    check_args(resolver, username, realm=realm, callback=callback)
    return _schedule(
        credentials._find,
        (resolver, username, realm, Options(debug, hide, hasher)),
        callback,
    )


def exists(
    resolver: Resolver,
    username: str,
    realm: str,
    callback: Callback,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> asyncio.Task:
    """Call back with ``(None, bool)``."""
    check_args(resolver, username, realm=realm, callback=callback)
    return _schedule(
        credentials._exists,
        (resolver, username, realm, Options(debug, hide, hasher)),
        callback,
    )


def verify_password(
    resolver: Resolver,
    username: str,
    password: str,
    realm: str,
    callback: Callback,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> asyncio.Task:
    check_args(
        resolver, username, password, realm, callback, check_password_length=False
    )
    return _schedule(
        credentials._verify_password,
        (resolver, username, password, realm, Options(debug, hide, hasher)),
        callback,
    )


def set_password(
    resolver: Resolver,
    username: str,
    password: str,
    realm: str,
    callback: Callback,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> asyncio.Task:
    check_args(resolver, username, password, realm, callback)
    return _schedule(
        credentials._set_password,
        (resolver, username, password, realm, Options(debug, hide, hasher)),
        callback,
    )


def register(
    resolver: Resolver,
    username: str,
    password: str,
    realm: str,
    callback: Callback,
    *,
    debug: bool = False,
    hide: bool = False,
    hasher: Hasher = default_hasher,
) -> asyncio.Task:
    """Call back with ``(None, record)`` or ``(UserExistsError, None)``."""
    check_args(resolver, username, password, realm, callback)
    return _schedule(
        credentials._register,
        (resolver, username, password, realm, Options(debug, hide, hasher)),
        callback,
    )
