"""
FastAPI dependency injection.

Dependencies provide repositories, configuration and the current trainer
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests
- Connection lifecycle is managed in one place

Authentication itself is the identity provider's job. By the time a
request reaches us, the provider (or the gateway in front of us) has
verified the trainer and forwards their claims as X-User-* headers.
We trust those headers only from callers holding one of our API keys.
"""

import logging
from typing import Annotated, Generator, Optional

from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.training.models import Trainer
from ..infrastructure.snowflake.client import (
    MockSnowflakeConnection,
    create_snowflake_connection,
)
from ..infrastructure.snowflake.repositories.training import (
    SnowflakeConfig,
    SnowflakeConnection,
    TrainingRepository,
)
from ..infrastructure.snowflake.repositories.users import UserRepository

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Shared mock connection so data persists across requests in mock mode
_mock_snowflake_connection: Optional[MockSnowflakeConnection] = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def verify_api_key(api_key: Optional[str], settings: Settings) -> str:
    """
    Validate the API key of the calling frontend or gateway.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8]}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


async def get_current_trainer(
    settings: Annotated[Settings, Depends(get_settings)],
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_email: Annotated[Optional[str], Header()] = None,
    x_user_first_name: Annotated[Optional[str], Header()] = None,
    x_user_last_name: Annotated[Optional[str], Header()] = None,
    x_user_profile_image_url: Annotated[Optional[str], Header()] = None,
    api_key: Optional[str] = Security(api_key_header),
) -> Trainer:
    """
    Build the signed-in trainer from identity provider claims.

    Identity is checked before the API key: no signed-in trainer is a 401
    whatever else the request carries. Claims from a caller without a
    valid key are a 403.
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request without trainer identity")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    verify_api_key(api_key, settings)

    return Trainer(
        id=x_user_id.strip(),
        email=x_user_email,
        first_name=x_user_first_name,
        last_name=x_user_last_name,
        profile_image_url=x_user_profile_image_url,
    )


# ---------------------------------------------------------------------------
# Database Dependencies
# ---------------------------------------------------------------------------

def snowflake_config_from_settings(settings: Settings) -> SnowflakeConfig:
    return SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )


def get_connection(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide a database connection for the duration of one request.

    This is a generator function because we need to manage the
    connection lifecycle: open, yield to the route, close afterwards.
    FastAPI caches it per request, so both repositories share it.

    In mock mode, we reuse the same connection across requests
    so that data persists while the process runs.
    """
    global _mock_snowflake_connection

    if settings.snowflake_mock_mode:
        if _mock_snowflake_connection is None:
            _mock_snowflake_connection = MockSnowflakeConnection()
            logger.info("Created shared mock Snowflake connection")
        yield _mock_snowflake_connection
    else:
        with create_snowflake_connection(config=snowflake_config_from_settings(settings)) as conn:
            yield conn


def get_training_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_connection)],
) -> TrainingRepository:
    return TrainingRepository(conn)


def get_user_repository(
    conn: Annotated[SnowflakeConnection, Depends(get_connection)],
) -> UserRepository:
    return UserRepository(conn)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
CurrentTrainer = Annotated[Trainer, Depends(get_current_trainer)]
TrainingRepositoryDep = Annotated[TrainingRepository, Depends(get_training_repository)]
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
