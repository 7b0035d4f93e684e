#!/usr/bin/env python3
"""
Create the TrainerDesk tables in Snowflake.

Safe to run repeatedly: every statement is CREATE ... IF NOT EXISTS.
Snowflake records but doesn't enforce foreign keys, which is why the
repository deletes a client's sessions itself.

Usage:
    python scripts/init_schema.py [--dry-run]

Requires:
    - .env file (or environment) with Snowflake credentials
"""

import argparse
import os
import sys
from pathlib import Path

# Make the package importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from trainerdesk.config.settings import Settings  # noqa: E402
from trainerdesk.infrastructure.snowflake.client import (  # noqa: E402
    SnowflakeConnectionError,
    create_snowflake_connection,
)
from trainerdesk.api.dependencies import snowflake_config_from_settings  # noqa: E402


DDL_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id VARCHAR PRIMARY KEY,
        email VARCHAR UNIQUE,
        first_name VARCHAR,
        last_name VARCHAR,
        profile_image_url VARCHAR,
        created_at TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP(),
        updated_at TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS clients (
        client_id VARCHAR(36) PRIMARY KEY,
        trainer_id VARCHAR NOT NULL REFERENCES users (user_id),
        name VARCHAR NOT NULL,
        email VARCHAR,
        phone VARCHAR,
        goals VARCHAR,
        session_cost INTEGER,
        created_at TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS training_sessions (
        session_id VARCHAR(36) PRIMARY KEY,
        client_id VARCHAR(36) NOT NULL REFERENCES clients (client_id),
        trainer_id VARCHAR NOT NULL REFERENCES users (user_id),
        session_date TIMESTAMP_TZ NOT NULL,
        notes VARCHAR,
        duration_minutes INTEGER DEFAULT 60,
        paid BOOLEAN DEFAULT FALSE
    )
    """,
]


def create_tables(settings: Settings, dry_run: bool = False) -> bool:
    if dry_run:
        print("\n=== DRY RUN - No statements will be executed ===\n")
        for statement in DDL_STATEMENTS:
            print(statement.strip())
            print()
        return True

    missing = [f for f in settings.validate_required_fields() if f.startswith("SNOWFLAKE")]
    if missing:
        print(f"ERROR: Missing {', '.join(missing)}")
        return False

    try:
        print(f"Connecting to Snowflake account: {settings.snowflake_account}")
        with create_snowflake_connection(config=snowflake_config_from_settings(settings)) as conn:
            cursor = conn.cursor()
            try:
                for statement in DDL_STATEMENTS:
                    cursor.execute(statement)
                    table = statement.split("EXISTS")[1].split("(")[0].strip()
                    print(f"[OK] {table}")
                conn.commit()
            finally:
                cursor.close()

    except SnowflakeConnectionError as e:
        print(f"ERROR connecting to Snowflake: {e}")
        return False

    print("\n=== Schema ready ===")
    return True


def main():
    parser = argparse.ArgumentParser(description='Create TrainerDesk tables in Snowflake')
    parser.add_argument('--dry-run', action='store_true', help='Print the DDL, don\'t execute it')
    args = parser.parse_args()

    if os.getenv('SNOWFLAKE_MOCK_MODE', '').lower() in ('1', 'true', 'yes'):
        print("SNOWFLAKE_MOCK_MODE is set; the mock database needs no schema.")
        sys.exit(0)

    success = create_tables(Settings(), dry_run=args.dry_run)

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
