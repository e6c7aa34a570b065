"""Unit tests for database session finalization."""

from __future__ import annotations

from typing import Any

import pytest

from app.core.database import close_read_only_transaction, get_session, get_session_context


class _FakeSessionContextManager:
    def __init__(self, session: "_FakeSession") -> None:
        self._session = session

    async def __aenter__(self) -> "_FakeSession":
        return self._session

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        return None


class _FakeSessionMaker:
    def __init__(self, session: "_FakeSession") -> None:
        self._session = session

    def __call__(self) -> _FakeSessionContextManager:
        return _FakeSessionContextManager(self._session)


class _FakeSession:
    def __init__(self) -> None:
        self.new: set[object] = set()
        self.dirty: set[object] = set()
        self.deleted: set[object] = set()
        self._in_transaction = True
        self.commit_calls = 0
        self.rollback_calls = 0
        self.commit_error: Exception | None = None

    def in_transaction(self) -> bool:
        return self._in_transaction

    async def commit(self) -> None:
        self.commit_calls += 1
        if self.commit_error is not None:
            raise self.commit_error
        self._in_transaction = False

    async def rollback(self) -> None:
        self.rollback_calls += 1
        self._in_transaction = False


@pytest.fixture
def fake_session(monkeypatch: pytest.MonkeyPatch) -> _FakeSession:
    session = _FakeSession()
    monkeypatch.setattr("app.core.database.async_session_maker", _FakeSessionMaker(session))
    return session


@pytest.mark.asyncio
async def test_session_context_commits_on_exit(fake_session: _FakeSession) -> None:
    async with get_session_context() as yielded:
        assert yielded is fake_session

    assert fake_session.commit_calls == 1
    assert fake_session.rollback_calls == 0


@pytest.mark.asyncio
async def test_non_committing_mode_closes_clean_transaction(fake_session: _FakeSession) -> None:
    async with get_session_context(commit_on_exit=False):
        pass

    assert fake_session.commit_calls == 1
    assert fake_session.rollback_calls == 0


@pytest.mark.asyncio
async def test_non_committing_mode_rejects_pending_orm_state(fake_session: _FakeSession) -> None:
    fake_session.dirty.add(object())

    with pytest.raises(RuntimeError, match="pending ORM changes"):
        async with get_session_context(commit_on_exit=False):
            pass

    assert fake_session.commit_calls == 0
    assert fake_session.rollback_calls == 1


@pytest.mark.asyncio
async def test_errors_inside_session_roll_back(fake_session: _FakeSession) -> None:
    with pytest.raises(ValueError):
        async with get_session_context():
            raise ValueError("bad input")

    assert fake_session.commit_calls == 0
    assert fake_session.rollback_calls == 1


@pytest.mark.asyncio
async def test_get_session_dependency_commits(fake_session: _FakeSession) -> None:
    generator = get_session()
    yielded = await generator.__anext__()
    assert yielded is fake_session

    with pytest.raises(StopAsyncIteration):
        await generator.__anext__()

    assert fake_session.commit_calls == 1


@pytest.mark.asyncio
async def test_close_read_only_transaction_ignores_transient_closed_connection() -> None:
    session = _FakeSession()
    session.commit_error = RuntimeError("connection is closed")

    await close_read_only_transaction(session, context="unit_test")  # type: ignore[arg-type]

    assert session.commit_calls == 1


@pytest.mark.asyncio
async def test_close_read_only_transaction_reraises_other_errors() -> None:
    session = _FakeSession()
    session.commit_error = RuntimeError("constraint violated")

    with pytest.raises(RuntimeError, match="constraint violated"):
        await close_read_only_transaction(session, context="unit_test")  # type: ignore[arg-type]
