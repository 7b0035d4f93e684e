"""
Snowflake repository for clients and training sessions.

This module implements the repository pattern for the practice's data.
The repository:
1. Translates between domain models and database rows
2. Encapsulates all SQL queries
3. Scopes listing and creation by the owning trainer

Routes never write SQL directly - they ask the repository for what they
need in domain terms.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Protocol
from uuid import UUID

from trainerdesk.core.training.models import Client, TrainingSession


logger = logging.getLogger(__name__)


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "TRAINERDESK"
    schema: str = "PRACTICE"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


class RecordNotFoundError(Exception):
    """Raised when a requested row doesn't exist."""
    pass


class ClientNotFoundError(RecordNotFoundError):
    """Raised when a requested client doesn't exist."""
    pass


class SessionNotFoundError(RecordNotFoundError):
    """Raised when a requested training session doesn't exist."""
    pass


CLIENT_COLUMNS = (
    "client_id, trainer_id, name, email, phone, goals, session_cost, created_at"
)
SESSION_COLUMNS = (
    "session_id, client_id, trainer_id, session_date, notes, duration_minutes, paid"
)

# Fields a client update may touch. Ownership and identity are fixed.
UPDATABLE_CLIENT_FIELDS = frozenset({"name", "email", "phone", "goals", "session_cost"})
SESSION_INPUT_FIELDS = frozenset({"client_id", "session_date", "notes", "duration_minutes", "paid"})


class TrainingRepository:
    """
    Repository for client and session persistence.

    Each method corresponds to a use case the application needs. Lookups
    by id raise a *NotFoundError rather than returning None so callers
    can't forget the missing-row case.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    # -----------------------------------------------------------------------
    # Clients
    # -----------------------------------------------------------------------

    def get_clients(self, trainer_id: str) -> list[Client]:
        """All clients owned by the trainer, oldest first."""
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CLIENT_COLUMNS}
                FROM clients
                WHERE trainer_id = %s
                ORDER BY created_at
            """, (trainer_id,))

            return [self._build_client(row) for row in cursor.fetchall()]

        finally:
            cursor.close()

    def get_client(self, client_id: UUID) -> Client:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CLIENT_COLUMNS}
                FROM clients
                WHERE client_id = %s
            """, (str(client_id),))

            row = cursor.fetchone()
            if not row:
                raise ClientNotFoundError(f"Client {client_id} not found")

            return self._build_client(row)

        finally:
            cursor.close()

    def create_client(self, trainer_id: str, data: dict[str, Any]) -> Client:
        """
        Persist a new client for the trainer.

        The id and created_at are generated here; anything in data that
        tries to set them is ignored along with the owner.
        """
        fields = {k: v for k, v in data.items() if k in UPDATABLE_CLIENT_FIELDS}
        client = Client(trainer_id=trainer_id, **fields)

        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO clients ({CLIENT_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                str(client.id), client.trainer_id, client.name, client.email,
                client.phone, client.goals, client.session_cost, client.created_at,
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to create client",
                extra={"trainer_id": trainer_id, "error": str(e)}
            )
            self._conn.rollback()
            raise
        finally:
            cursor.close()

        return client

    def update_client(self, client_id: UUID, changes: dict[str, Any]) -> Client:
        """
        Apply a partial update and return the resulting client.

        Raises ValueError for fields that can't be updated or values that
        break a client invariant, and ClientNotFoundError for unknown ids.
        """
        unknown = set(changes) - UPDATABLE_CLIENT_FIELDS
        if unknown:
            raise ValueError(f"Cannot update client fields: {', '.join(sorted(unknown))}")

        current = self.get_client(client_id)
        if not changes:
            return current

        updated = replace(current, **changes)

        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                UPDATE clients SET
                    name = %s,
                    email = %s,
                    phone = %s,
                    goals = %s,
                    session_cost = %s
                WHERE client_id = %s
            """, (
                updated.name, updated.email, updated.phone, updated.goals,
                updated.session_cost, str(client_id),
            ))

            if cursor.rowcount == 0:
                raise ClientNotFoundError(f"Client {client_id} not found")

            self._conn.commit()

        except RecordNotFoundError:
            self._conn.rollback()
            raise
        except Exception as e:
            logger.error(
                "Failed to update client",
                extra={"client_id": str(client_id), "error": str(e)}
            )
            self._conn.rollback()
            raise
        finally:
            cursor.close()

        return updated

    def delete_client(self, client_id: UUID) -> None:
        """
        Delete a client together with all of their sessions.

        Both statements go out in one transaction: sessions first, since
        they reference the client.
        """
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM training_sessions WHERE client_id = %s
            """, (str(client_id),))
            sessions_deleted = cursor.rowcount

            cursor.execute("""
                DELETE FROM clients WHERE client_id = %s
            """, (str(client_id),))

            if cursor.rowcount == 0:
                raise ClientNotFoundError(f"Client {client_id} not found")

            self._conn.commit()

            logger.info(
                "Deleted client",
                extra={"client_id": str(client_id), "sessions_deleted": sessions_deleted}
            )

        except RecordNotFoundError:
            self._conn.rollback()
            raise
        except Exception as e:
            logger.error(
                "Failed to delete client",
                extra={"client_id": str(client_id), "error": str(e)}
            )
            self._conn.rollback()
            raise
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Sessions
    # -----------------------------------------------------------------------

    def get_sessions(self, trainer_id: str) -> list[TrainingSession]:
        """All sessions owned by the trainer, most recent first."""
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SESSION_COLUMNS}
                FROM training_sessions
                WHERE trainer_id = %s
                ORDER BY session_date DESC
            """, (trainer_id,))

            return [self._build_session(row) for row in cursor.fetchall()]

        finally:
            cursor.close()

    def get_session(self, session_id: UUID) -> TrainingSession:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {SESSION_COLUMNS}
                FROM training_sessions
                WHERE session_id = %s
            """, (str(session_id),))

            row = cursor.fetchone()
            if not row:
                raise SessionNotFoundError(f"Session {session_id} not found")

            return self._build_session(row)

        finally:
            cursor.close()

    def create_session(self, trainer_id: str, data: dict[str, Any]) -> TrainingSession:
        """
        Persist a new session for one of the trainer's clients.

        A client that belongs to someone else is reported exactly like a
        missing one.
        """
        fields = {k: v for k, v in data.items() if k in SESSION_INPUT_FIELDS}
        session = TrainingSession(trainer_id=trainer_id, **fields)

        client = self.get_client(session.client_id)
        if client.trainer_id != trainer_id:
            raise ClientNotFoundError(f"Client {session.client_id} not found")

        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                INSERT INTO training_sessions ({SESSION_COLUMNS})
                VALUES (%s, %s, %s, %s, %s, %s, %s)
            """, (
                str(session.id), str(session.client_id), session.trainer_id,
                session.session_date, session.notes, session.duration_minutes,
                session.paid,
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to create session",
                extra={"trainer_id": trainer_id, "error": str(e)}
            )
            self._conn.rollback()
            raise
        finally:
            cursor.close()

        return session

    def update_session_paid(self, session_id: UUID, paid: bool) -> TrainingSession:
        """
        Set a session's paid flag.

        Idempotent: setting the flag to its current value succeeds and
        returns the same session.
        """
        session = self.get_session(session_id)

        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                UPDATE training_sessions SET paid = %s WHERE session_id = %s
            """, (paid, str(session_id)))

            if cursor.rowcount == 0:
                raise SessionNotFoundError(f"Session {session_id} not found")

            self._conn.commit()

        except RecordNotFoundError:
            self._conn.rollback()
            raise
        except Exception as e:
            logger.error(
                "Failed to update session payment",
                extra={"session_id": str(session_id), "error": str(e)}
            )
            self._conn.rollback()
            raise
        finally:
            cursor.close()

        session.mark_paid(paid)
        return session

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------

    def ping(self) -> bool:
        cursor = self._conn.cursor()

        try:
            cursor.execute("SELECT 1")
            row = cursor.fetchone()
            return bool(row and row[0] == 1)
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _build_client(self, row) -> Client:
        return Client(
            id=UUID(str(row[0])),
            trainer_id=row[1],
            name=row[2],
            email=row[3],
            phone=row[4],
            goals=row[5],
            session_cost=row[6],
            created_at=row[7],
        )

    def _build_session(self, row) -> TrainingSession:
        return TrainingSession(
            id=UUID(str(row[0])),
            client_id=UUID(str(row[1])),
            trainer_id=row[2],
            session_date=row[3],
            notes=row[4],
            duration_minutes=row[5],
            paid=bool(row[6]),
        )
