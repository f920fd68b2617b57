import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

from .errors import TransactionError

if TYPE_CHECKING:
    from .connection import Connection, Result

logger = logging.getLogger("simplecrud")


class TransactionManager:

    def __init__(self, connection: "Connection"):
        """
        Initialize the transaction manager.

        Args:
            connection: The Connection whose statements are grouped
        """
        self._connection = connection
        self._level = 0

    @property
    def level(self) -> int:
        """Current transaction nesting level (0 outside any transaction)."""
        return self._level

    def _run(self, sql: str) -> None:
        logger.debug(sql)
        self._connection.execute(sql)

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions with SAVEPOINT support.

        Yields:
            Transaction: Transaction object for executing statements
        """
        level = self._level + 1
        savepoint_name = f"savepoint_{level}" if level > 1 else None

        self._run(f"SAVEPOINT {savepoint_name}" if savepoint_name else "BEGIN")
        self._level = level
        transaction_obj = Transaction(self._connection, self, level)

        try:
            yield transaction_obj
        except BaseException:
            if savepoint_name:
                self._run(f"ROLLBACK TO SAVEPOINT {savepoint_name}")
            else:
                self._run("ROLLBACK")
            raise
        else:
            if savepoint_name:
                self._run(f"RELEASE SAVEPOINT {savepoint_name}")
            else:
                self._run("COMMIT")
        finally:
            transaction_obj._active = False
            self._level = level - 1


class Transaction:

    def __init__(self, connection: "Connection", manager: TransactionManager, level: int):
        self._connection = connection
        self._manager = manager
        self._level = level
        self._active = True

    @property
    def level(self) -> int:
        return self._level

    def execute(self, sql: str, params: Optional[dict[str, Any]] = None) -> "Result":
        """
        Execute a statement within this transaction.

        Raises:
            TransactionError: If the transaction is over, or a nested one is open
        """
        if not self._active:
            raise TransactionError("Transaction is no longer active")
        current_level = self._manager.level
        if current_level > self._level:
            raise TransactionError(
                f"Cannot use transaction level {self._level} from level {current_level}. "
                "Higher-level transactions cannot be accessed from nested transactions."
            )
        return self._connection.execute(sql, params)
