# tenant_auth/storage/interfaces.py
from abc import ABC, abstractmethod
from typing import AsyncContextManager, Any


class AbstractUnitOfWork(ABC):
    """
    Transaction boundary over the tenant, user and licence stores.

    Services wrap multi-row changes in ``async with uow.transaction():`` so that
    either every write inside the block is committed or none is.
    """

    @abstractmethod
    def transaction(self) -> AsyncContextManager[Any]:
        """Return an async context manager delimiting one atomic unit of work."""
        pass
