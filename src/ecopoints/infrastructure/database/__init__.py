"""Database infrastructure module."""

from ecopoints.infrastructure.database.session import (
    AsyncSessionLocal,
    async_engine,
    create_async_db_engine,
    create_session_factory,
)
from ecopoints.infrastructure.database.transaction import (
    RetryPolicy,
    run_transaction,
)

__all__ = [
    "async_engine",
    "AsyncSessionLocal",
    "create_async_db_engine",
    "create_session_factory",
    "RetryPolicy",
    "run_transaction",
]
