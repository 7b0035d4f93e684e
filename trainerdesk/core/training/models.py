"""
Domain models for a personal-training practice.

These models represent the core business concepts: the trainer, the
clients they coach, and the sessions held with those clients. They have no
dependencies on FastAPI, Snowflake, or any wire format. Invariants are
checked in __post_init__, which also runs on dataclasses.replace(), so an
update can never produce an invalid entity.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4


DEFAULT_SESSION_DURATION_MINUTES = 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Trainer:
    """
    The authenticated user who owns clients and sessions.

    The id is the subject issued by the identity provider, so it is a
    string rather than a UUID we generate.
    """
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Trainer id cannot be empty")

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        if parts:
            return " ".join(parts)
        return self.email or self.id


@dataclass
class Client:
    """
    A trainee managed by exactly one trainer.

    session_cost is the price of one session in whole currency units.
    It's optional because some trainers log sessions before agreeing
    on a rate.
    """
    trainer_id: str
    name: str
    id: UUID = field(default_factory=uuid4)
    email: Optional[str] = None
    phone: Optional[str] = None
    goals: Optional[str] = None
    session_cost: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.trainer_id:
            raise ValueError("Client must belong to a trainer")
        if self.name is None or not self.name.strip():
            raise ValueError("Client name cannot be empty")
        if self.session_cost is not None and self.session_cost < 0:
            raise ValueError("Session cost cannot be negative")


@dataclass
class TrainingSession:
    """
    A training appointment between a trainer and one of their clients.

    trainer_id duplicates the client's owner so sessions can be listed
    per trainer without a join.
    """
    client_id: UUID
    trainer_id: str
    session_date: datetime
    id: UUID = field(default_factory=uuid4)
    notes: Optional[str] = None
    duration_minutes: int = DEFAULT_SESSION_DURATION_MINUTES
    paid: bool = False

    def __post_init__(self) -> None:
        if not self.trainer_id:
            raise ValueError("Session must belong to a trainer")
        if self.duration_minutes is None:
            self.duration_minutes = DEFAULT_SESSION_DURATION_MINUTES
        if self.duration_minutes < 0:
            raise ValueError("Session duration cannot be negative")

    def mark_paid(self, paid: bool = True) -> None:
        self.paid = paid
