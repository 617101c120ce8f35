from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class UnitOfWork:
    """One session, one transaction.

    Usage::

        async with UnitOfWork(session_maker) as uow:
            ...
            await uow.commit()

    Leaving the block without ``commit()`` (an early return, an exception,
    a cancelled task) rolls everything back.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self.session: Optional[AsyncSession] = None
        self.committed = False

    async def __aenter__(self) -> "UnitOfWork":
        self.session = self._session_maker()
        await self.session.begin()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if not self.committed:
                await self.rollback()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        await self.session.commit()
        self.committed = True

    async def rollback(self) -> None:
        await self.session.rollback()
