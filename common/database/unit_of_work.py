"""
Unit of Work for multi-collection writes on MongoDB.

MongoDB only guarantees atomicity per document unless the deployment
supports multi-document transactions (replica set or sharded cluster).
MongoUnitOfWork gives callers a single all-or-nothing contract either way:

- With transactions, it opens a client session and transaction. Callers
  pass `uow.session` to every write; an exception aborts the transaction.
- Without transactions, callers register a compensating action after each
  successful write. On failure the compensations run in reverse order.
  Each compensation must be idempotent (e.g. delete_one by _id).

Example:
    async with MongoUnitOfWork(client, use_transactions=False) as uow:
        result = await profiles.insert_one(doc, session=uow.session)
        uow.add_compensation(
            f"delete profile {result.inserted_id}",
            lambda: profiles.delete_one({"_id": result.inserted_id}),
        )
        ...

    if uow.failed_compensations:
        # Some undo steps failed; data may be left behind.
        ...
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorClientSession

logger = logging.getLogger(__name__)

Compensation = Callable[[], Awaitable[Any]]


class MongoUnitOfWork:
    """Unit of Work backed by a transaction or by compensating actions."""

    def __init__(
        self,
        client: Optional[AsyncIOMotorClient],
        use_transactions: bool,
        name: str = "unit of work",
    ) -> None:
        if use_transactions and client is None:
            raise ValueError("A client is required when transactions are enabled")
        self._client = client
        self._use_transactions = use_transactions
        self._name = name
        self._session: Optional[AsyncIOMotorClientSession] = None
        self._compensations: List[Tuple[str, Compensation]] = []
        self.failed_compensations: List[str] = []

    @property
    def session(self) -> Optional[AsyncIOMotorClientSession]:
        """Session to pass to each write (None without transactions)."""
        return self._session

    @property
    def uses_transaction(self) -> bool:
        return self._use_transactions

    def add_compensation(self, description: str, action: Compensation) -> None:
        """
        Register an undo step for a write that has just succeeded.

        Ignored inside a transaction, where abort undoes everything.
        """
        if self._use_transactions:
            return
        self._compensations.append((description, action))

    async def commit(self) -> None:
        """Commit the current transaction and forget pending compensations."""
        if self._session is not None and self._session.in_transaction:
            await self._session.commit_transaction()
        self._compensations.clear()

    async def rollback(self) -> None:
        """Abort the transaction, or replay compensations newest first."""
        if self._session is not None:
            if self._session.in_transaction:
                try:
                    await self._session.abort_transaction()
                    logger.info(f"{self._name}: transaction aborted")
                except Exception as e:
                    logger.error(f"{self._name}: failed to abort transaction: {e}")
                    self.failed_compensations.append("abort transaction")
            return

        while self._compensations:
            description, action = self._compensations.pop()
            try:
                await action()
                logger.info(f"{self._name}: compensated ({description})")
            except Exception as e:
                logger.error(f"{self._name}: compensation failed ({description}): {e}")
                self.failed_compensations.append(description)

    async def __aenter__(self) -> "MongoUnitOfWork":
        """Enter the context manager, starting a transaction when enabled."""
        self._compensations.clear()
        self.failed_compensations = []
        if self._use_transactions:
            self._session = await self._client.start_session()
            try:
                self._session.start_transaction()
            except Exception:
                # __aexit__ will not run, so release the session here
                await self._session.end_session()
                self._session = None
                raise
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Any,
    ) -> None:
        """Commit on success, roll back on error, always release the session."""
        try:
            if exc_type is None:
                await self.commit()
            else:
                await self.rollback()
        finally:
            if self._session is not None:
                await self._session.end_session()
                self._session = None
