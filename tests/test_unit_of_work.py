"""Unit tests for MongoUnitOfWork (transaction and compensation modes)."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from common.database.unit_of_work import MongoUnitOfWork


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def mock_session():
    session = MagicMock()
    session.in_transaction = True
    session.commit_transaction = AsyncMock()
    session.abort_transaction = AsyncMock()
    session.end_session = AsyncMock()
    return session


@pytest.fixture
def mock_client(mock_session):
    client = MagicMock()
    client.start_session = AsyncMock(return_value=mock_session)
    return client


def _recorder(calls, name):
    async def action():
        calls.append(name)
    return action


# ─────────────────────────────────────────────────────────────────
# Compensation mode
# ─────────────────────────────────────────────────────────────────


class TestCompensations:

    @pytest.mark.asyncio
    async def test_compensations_run_newest_first_on_error(self):
        calls = []

        with pytest.raises(RuntimeError):
            async with MongoUnitOfWork(client=None, use_transactions=False) as uow:
                uow.add_compensation("delete profile", _recorder(calls, "profile"))
                uow.add_compensation("delete user", _recorder(calls, "user"))
                raise RuntimeError("link failed")

        assert calls == ["user", "profile"]
        assert uow.failed_compensations == []

    @pytest.mark.asyncio
    async def test_compensations_discarded_on_success(self):
        calls = []

        async with MongoUnitOfWork(client=None, use_transactions=False) as uow:
            uow.add_compensation("delete profile", _recorder(calls, "profile"))

        await uow.rollback()

        assert calls == []

    @pytest.mark.asyncio
    async def test_failed_compensation_recorded_and_others_still_run(self):
        calls = []
        broken = AsyncMock(side_effect=ConnectionError("store unreachable"))

        with pytest.raises(RuntimeError):
            async with MongoUnitOfWork(client=None, use_transactions=False) as uow:
                uow.add_compensation("delete profile", _recorder(calls, "profile"))
                uow.add_compensation("delete user", broken)
                raise RuntimeError("link failed")

        broken.assert_awaited_once()
        assert calls == ["profile"]
        assert uow.failed_compensations == ["delete user"]

    @pytest.mark.asyncio
    async def test_session_is_none_without_transactions(self):
        async with MongoUnitOfWork(client=None, use_transactions=False) as uow:
            assert uow.session is None
            assert uow.uses_transaction is False


# ─────────────────────────────────────────────────────────────────
# Transaction mode
# ─────────────────────────────────────────────────────────────────


class TestTransactions:

    def test_client_required(self):
        with pytest.raises(ValueError):
            MongoUnitOfWork(client=None, use_transactions=True)

    @pytest.mark.asyncio
    async def test_commit_on_success(self, mock_client, mock_session):
        async with MongoUnitOfWork(client=mock_client, use_transactions=True) as uow:
            assert uow.session is mock_session

        mock_session.start_transaction.assert_called_once()
        mock_session.commit_transaction.assert_awaited_once()
        mock_session.abort_transaction.assert_not_awaited()
        mock_session.end_session.assert_awaited_once()
        assert uow.session is None

    @pytest.mark.asyncio
    async def test_abort_on_error(self, mock_client, mock_session):
        with pytest.raises(RuntimeError):
            async with MongoUnitOfWork(client=mock_client, use_transactions=True):
                raise RuntimeError("insert failed")

        mock_session.abort_transaction.assert_awaited_once()
        mock_session.commit_transaction.assert_not_awaited()
        mock_session.end_session.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_compensations_ignored_inside_transaction(self, mock_client):
        calls = []

        with pytest.raises(RuntimeError):
            async with MongoUnitOfWork(client=mock_client, use_transactions=True) as uow:
                uow.add_compensation("delete profile", _recorder(calls, "profile"))
                raise RuntimeError("insert failed")

        assert calls == []

    @pytest.mark.asyncio
    async def test_failed_abort_recorded(self, mock_client, mock_session):
        mock_session.abort_transaction.side_effect = ConnectionError("lost primary")

        with pytest.raises(RuntimeError):
            async with MongoUnitOfWork(client=mock_client, use_transactions=True) as uow:
                raise RuntimeError("insert failed")

        assert uow.failed_compensations == ["abort transaction"]
        mock_session.end_session.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_released_when_transaction_cannot_start(
        self, mock_client, mock_session
    ):
        mock_session.start_transaction.side_effect = RuntimeError("transactions unsupported")
        uow = MongoUnitOfWork(client=mock_client, use_transactions=True)

        with pytest.raises(RuntimeError):
            async with uow:
                pass

        mock_session.end_session.assert_awaited_once()
        assert uow.session is None
