"""
Snowflake repository for trainer accounts.

Trainer rows are owned by the identity provider: we never create a
trainer on our own, we only mirror the claims it hands us. upsert_user
is therefore a MERGE keyed on the provider's subject id.
"""

import logging
from datetime import datetime, timezone

from trainerdesk.core.training.models import Trainer

from .training import RecordNotFoundError, SnowflakeConnection


logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "user_id, email, first_name, last_name, profile_image_url, created_at, updated_at"
)


class UserNotFoundError(RecordNotFoundError):
    """Raised when a requested trainer doesn't exist."""
    pass


class UserRepository:
    """Repository for trainer persistence."""

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def get_user(self, user_id: str) -> Trainer:
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE user_id = %s
            """, (user_id,))

            row = cursor.fetchone()
            if not row:
                raise UserNotFoundError(f"User {user_id} not found")

            return Trainer(
                id=row[0],
                email=row[1],
                first_name=row[2],
                last_name=row[3],
                profile_image_url=row[4],
                created_at=row[5],
                updated_at=row[6],
            )

        finally:
            cursor.close()

    def upsert_user(self, trainer: Trainer) -> Trainer:
        """
        Insert or refresh a trainer from identity provider claims.

        This method is idempotent - calling it on every sign-in updates the
        profile fields and leaves created_at alone.
        """
        now = datetime.now(timezone.utc)
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                MERGE INTO users AS target
                USING (SELECT %s AS user_id) AS source
                ON target.user_id = source.user_id
                WHEN MATCHED THEN UPDATE SET
                    email = %s,
                    first_name = %s,
                    last_name = %s,
                    profile_image_url = %s,
                    updated_at = %s
                WHEN NOT MATCHED THEN INSERT (
                    user_id, email, first_name, last_name, profile_image_url,
                    created_at, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s)
            """, (
                trainer.id,
                trainer.email, trainer.first_name, trainer.last_name,
                trainer.profile_image_url, now,
                trainer.id, trainer.email, trainer.first_name, trainer.last_name,
                trainer.profile_image_url, now, now,
            ))
            self._conn.commit()

        except Exception as e:
            logger.error(
                "Failed to upsert user",
                extra={"user_id": trainer.id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

        return self.get_user(trainer.id)
