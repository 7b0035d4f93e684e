"""
Snowflake database connection management.

Provides connection factory and context manager for Snowflake operations.
Includes mock mode with in-memory storage for local development.

Using the repository pattern means most code never touches this module
directly - it goes through TrainingRepository and UserRepository, which
handle the translation between domain models and database rows.
"""

import base64
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from .repositories.training import SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Raised when Snowflake connection fails."""
    pass


def _der_private_key(pem_bytes: bytes) -> bytes:
    """
    Convert a PEM private key into the DER/PKCS8 bytes Snowflake expects.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    private_key = serialization.load_pem_private_key(
        pem_bytes,
        password=None,  # No password on the key
        backend=default_backend()
    )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def _load_private_key(config: SnowflakeConfig) -> Optional[bytes]:
    """Load the key-pair key from base64 (deployments) or a file (local)."""
    if config.private_key_base64:
        return _der_private_key(base64.b64decode(config.private_key_base64))

    if config.private_key_path:
        with open(config.private_key_path, 'rb') as key_file:
            return _der_private_key(key_file.read())

    return None


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If a private key (base64 or path) is set, uses key-pair auth
    - Otherwise, uses password auth

    Usage:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            # do work
            conn.commit()
    """
    import snowflake.connector

    connect_params = {
        'account': config.account,
        'user': config.user,
        'database': config.database,
        'schema': config.schema,
        'warehouse': config.warehouse,
        'role': config.role,
        'client_session_keep_alive': True,
    }

    private_key = _load_private_key(config)
    if private_key:
        logger.info("Using key-pair authentication for Snowflake")
        connect_params['private_key'] = private_key
    elif config.password:
        logger.info("Using password authentication for Snowflake")
        connect_params['password'] = config.password
    else:
        raise SnowflakeConnectionError(
            "Either password or a private key must be provided"
        )

    try:
        conn = snowflake.connector.connect(**connect_params)
    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}") from e

    logger.debug(
        "Established Snowflake connection",
        extra={
            "account": config.account,
            "database": config.database,
            "schema": config.schema,
        }
    )

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


# ---------------------------------------------------------------------------
# Mock Connection for Local Development
# ---------------------------------------------------------------------------

class MockSnowflakeCursor:
    """
    Mock Snowflake cursor for testing.

    Implements just enough of the cursor interface to support the
    repositories without a real database. Queries are recognised by
    pattern matching on their normalised text, and rows are stored as
    tuples in the same column order the repositories select.
    """

    def __init__(self, storage: dict) -> None:
        self._storage = storage
        self._results: list = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> 'MockSnowflakeCursor':
        logger.debug(
            "Mock cursor execute",
            extra={"query": query[:100], "params": params}
        )

        query_upper = " ".join(query.split()).upper()
        params = tuple(params or ())
        self._results = []
        self._rowcount = 0

        if query_upper.startswith('MERGE INTO USERS'):
            self._merge_user(params)
        elif query_upper.startswith('INSERT INTO'):
            self._handle_insert(query_upper, params)
        elif query_upper.startswith('UPDATE'):
            self._handle_update(query_upper, params)
        elif query_upper.startswith('DELETE FROM'):
            self._handle_delete(query_upper, params)
        elif query_upper.startswith('SELECT'):
            self._handle_select(query_upper, params)
        else:
            raise NotImplementedError(f"Mock cursor can't handle query: {query_upper[:60]}")

        return self

    def _merge_user(self, params: tuple) -> None:
        users = self._storage['users']
        user_id = params[0]
        existing = users.get(user_id)

        if existing:
            users[user_id] = (user_id, *params[1:5], existing[5], params[5])
        else:
            users[user_id] = tuple(params[6:13])
        self._rowcount = 1

    def _handle_insert(self, query: str, params: tuple) -> None:
        if query.startswith('INSERT INTO CLIENTS'):
            table = 'clients'
        elif query.startswith('INSERT INTO TRAINING_SESSIONS'):
            table = 'training_sessions'
        else:
            raise NotImplementedError(f"Mock cursor can't insert into: {query[:60]}")

        self._storage[table][params[0]] = params
        self._rowcount = 1

    def _handle_update(self, query: str, params: tuple) -> None:
        if query.startswith('UPDATE CLIENTS'):
            table, row_id = self._storage['clients'], params[-1]
            if row_id in table:
                row = table[row_id]
                # name, email, phone, goals, session_cost
                table[row_id] = (row[0], row[1], *params[0:5], row[7])
                self._rowcount = 1

        elif query.startswith('UPDATE TRAINING_SESSIONS'):
            table, row_id = self._storage['training_sessions'], params[-1]
            if row_id in table:
                table[row_id] = (*table[row_id][:6], params[0])
                self._rowcount = 1

    def _handle_delete(self, query: str, params: tuple) -> None:
        if query.startswith('DELETE FROM TRAINING_SESSIONS'):
            sessions = self._storage['training_sessions']
            doomed = [sid for sid, row in sessions.items() if row[1] == params[0]]
            for sid in doomed:
                del sessions[sid]
            self._rowcount = len(doomed)

        elif query.startswith('DELETE FROM CLIENTS'):
            removed = self._storage['clients'].pop(params[0], None)
            self._rowcount = 1 if removed else 0

    def _handle_select(self, query: str, params: tuple) -> None:
        if query == 'SELECT 1':
            self._results = [(1,)]

        elif 'FROM USERS WHERE USER_ID' in query:
            row = self._storage['users'].get(params[0])
            self._results = [row] if row else []

        elif 'FROM CLIENTS WHERE TRAINER_ID' in query:
            rows = [r for r in self._storage['clients'].values() if r[1] == params[0]]
            self._results = sorted(rows, key=lambda r: r[7])

        elif 'FROM CLIENTS WHERE CLIENT_ID' in query:
            row = self._storage['clients'].get(params[0])
            self._results = [row] if row else []

        elif 'FROM TRAINING_SESSIONS WHERE TRAINER_ID' in query:
            rows = [
                r for r in self._storage['training_sessions'].values()
                if r[2] == params[0]
            ]
            self._results = sorted(rows, key=lambda r: r[3], reverse=True)

        elif 'FROM TRAINING_SESSIONS WHERE SESSION_ID' in query:
            row = self._storage['training_sessions'].get(params[0])
            self._results = [row] if row else []

        else:
            raise NotImplementedError(f"Mock cursor can't handle query: {query[:60]}")

    def fetchone(self):
        """Fetch one row from results."""
        if not self._results:
            return None
        return self._results[0]

    def fetchall(self) -> list:
        """Fetch all rows from results."""
        return list(self._results)

    def close(self) -> None:
        """Close cursor (no-op for mock)."""
        pass

    @property
    def rowcount(self) -> int:
        """Return number of rows affected."""
        return self._rowcount


class MockSnowflakeConnection:
    """
    Mock Snowflake connection for local development.

    Stores data in memory using a simple dictionary structure.
    This enables testing the full API without a real database.

    Not suitable for production, but perfect for:
    - Local development
    - Unit tests
    - CI/CD environments
    """

    def __init__(self) -> None:
        # In-memory storage: {table_name: {id: row_tuple}}
        self._storage: dict[str, dict[str, tuple]] = {
            'users': {},
            'clients': {},
            'training_sessions': {},
        }

        logger.info("Initialized mock Snowflake connection (in-memory)")

    def cursor(self) -> MockSnowflakeCursor:
        """Create a mock cursor."""
        return MockSnowflakeCursor(self._storage)

    def commit(self) -> None:
        """Commit transaction (no-op for mock, always auto-commits)."""
        logger.debug("Mock connection commit")

    def rollback(self) -> None:
        """Rollback transaction (no-op for mock)."""
        logger.debug("Mock connection rollback")

    def close(self) -> None:
        """Close connection (no-op for mock)."""
        logger.debug("Mock connection close")

    # Helper methods for testing
    def _count(self, table: str) -> int:
        """Number of rows in a mock table (for test assertions)."""
        return len(self._storage[table])


@contextmanager
def get_mock_snowflake_connection() -> Generator[MockSnowflakeConnection, None, None]:
    conn = MockSnowflakeConnection()
    try:
        yield conn
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

@contextmanager
def create_snowflake_connection(
    config: Optional[SnowflakeConfig] = None,
    mock_mode: bool = False,
) -> Generator[SnowflakeConnection, None, None]:
    """
    Create Snowflake connection based on configuration.

    Factory function that returns either a real or mock connection
    depending on mock_mode flag.

    Args:
        config: Snowflake configuration (required if not mock_mode)
        mock_mode: If True, return mock connection for testing

    Yields:
        SnowflakeConnection implementation (real or mock)
    """
    if mock_mode:
        with get_mock_snowflake_connection() as conn:
            yield conn
    else:
        if config is None:
            raise ValueError("config is required when not in mock mode")

        with get_snowflake_connection(config) as conn:
            yield conn
