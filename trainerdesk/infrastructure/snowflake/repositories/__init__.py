"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .training import (
    ClientNotFoundError,
    RecordNotFoundError,
    SessionNotFoundError,
    TrainingRepository,
)
from .users import UserNotFoundError, UserRepository

__all__ = [
    "ClientNotFoundError",
    "RecordNotFoundError",
    "SessionNotFoundError",
    "TrainingRepository",
    "UserNotFoundError",
    "UserRepository",
]
