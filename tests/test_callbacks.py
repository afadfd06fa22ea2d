#!/usr/bin/env python3
"""Unit tests for the callback-style wrappers."""

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

from passuser import callbacks
from passuser.errors import UserExistsError
from passuser.resolvers import MemoryResolver
from passuser.validation import DEFAULT_REALM


class Recorder:
    """Callback that records each invocation."""

    def __init__(self):
        self.calls = []

    def __call__(self, err, result):
        self.calls.append((err, result))


class TestValidation:
    def test_non_callable_callback(self):
        with pytest.raises(TypeError, match="callback must be callable"):
            callbacks.find(MemoryResolver(), "foo", "_default", None)

    def test_realm_checked_before_callback(self):
        with pytest.raises(TypeError, match="realm must be a string"):
            callbacks.exists(MemoryResolver(), "foo", None, None)

    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            callbacks.find(MemoryResolver(), "foo", "_default", Recorder())


class TestOperations:
    @pytest.mark.asyncio
    async def test_lifecycle(self):
        db = MemoryResolver()

        cb = Recorder()
        await callbacks.register(db, "foo", "secr3t", "_default", cb)
        await asyncio.sleep(0)
        assert len(cb.calls) == 1
        err, record = cb.calls[0]
        assert err is None
        assert record.username == "foo"

        cb = Recorder()
        await callbacks.exists(db, "foo", "_default", cb)
        await asyncio.sleep(0)
        assert cb.calls == [(None, True)]

        cb = Recorder()
        await callbacks.verify_password(db, "foo", "wrong", "_default", cb)
        await asyncio.sleep(0)
        assert cb.calls == [(None, False)]

        cb = Recorder()
        await callbacks.set_password(db, "foo", "newpass", "_default", cb)
        await asyncio.sleep(0)
        assert cb.calls == [(None, None)]

        cb = Recorder()
        await callbacks.verify_password(db, "foo", "newpass", "_default", cb)
        await asyncio.sleep(0)
        assert cb.calls == [(None, True)]

    @pytest.mark.asyncio
    async def test_error_delivered_once(self):
        db = MemoryResolver([{"realm": "_default", "username": "foo"}])
        cb = Recorder()

        task = callbacks.register(db, "foo", "secr3t", "_default", cb)
        with pytest.raises(UserExistsError):
            await task
        await asyncio.sleep(0)

        assert len(cb.calls) == 1
        err, result = cb.calls[0]
        assert isinstance(err, UserExistsError)
        assert result is None

    @pytest.mark.asyncio
    async def test_default_realm_passed_explicitly(self):
        db = MemoryResolver()
        cb = Recorder()
        await callbacks.register(db, "foo", "secr3t", DEFAULT_REALM, cb)
        await asyncio.sleep(0)

        err, record = cb.calls[0]
        assert err is None
        assert record.realm == "_default"

    @pytest.mark.asyncio
    async def test_find_not_found(self):
        cb = Recorder()
        await callbacks.find(MemoryResolver(), "foo", "_default", cb)
        await asyncio.sleep(0)
        assert cb.calls == [(None, None)]
