"""
Request and response models shared by every route.

These are the wire shapes of the API. JSON uses camelCase field names
(trainerId, sessionCost, clientId, ...) because that's what the web
client speaks; input models also accept the snake_case names so scripts
and tests can use either.

Validation here covers shape and ranges. The domain models re-check
their own invariants, so an update that slips past these (e.g. setting
name to null) is still rejected.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

from ..core.training.ledger import PaymentSummary
from ..core.training.models import (
    DEFAULT_SESSION_DURATION_MINUTES,
    Client,
    Trainer,
    TrainingSession,
)


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""
    message: str = Field(description="What went wrong")
    field: Optional[str] = Field(None, description="Offending input field, for validation errors")


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class ClientCreate(CamelModel):
    """Request to add a client."""
    name: str = Field(min_length=1, max_length=200, description="Client's name")
    email: Optional[str] = Field(None, max_length=320)
    phone: Optional[str] = Field(None, max_length=50)
    goals: Optional[str] = Field(None, description="What the client is training for")
    session_cost: Optional[int] = Field(
        None,
        ge=0,
        description="Price of one session in whole currency units",
    )


class ClientUpdate(CamelModel):
    """Partial update; only the fields present in the body are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=320)
    phone: Optional[str] = Field(None, max_length=50)
    goals: Optional[str] = None
    session_cost: Optional[int] = Field(None, ge=0)


class ClientResponse(CamelModel):
    id: UUID
    trainer_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    goals: Optional[str] = None
    session_cost: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            trainer_id=client.trainer_id,
            name=client.name,
            email=client.email,
            phone=client.phone,
            goals=client.goals,
            session_cost=client.session_cost,
            created_at=client.created_at,
        )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class SessionCreate(CamelModel):
    """Request to log a training session."""
    client_id: UUID = Field(description="Client the session was held with")
    session_date: datetime = Field(alias="date", description="When the session took place")
    notes: Optional[str] = None
    duration_minutes: int = Field(
        DEFAULT_SESSION_DURATION_MINUTES,
        alias="duration",
        ge=0,
        description="Length of the session in minutes",
    )
    paid: bool = False

    @field_validator("session_date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Dates sent without an offset are taken as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SessionPaidUpdate(CamelModel):
    paid: StrictBool


class SessionResponse(CamelModel):
    id: UUID
    client_id: UUID
    trainer_id: str
    session_date: datetime = Field(alias="date")
    notes: Optional[str] = None
    duration_minutes: int = Field(alias="duration")
    paid: bool

    @classmethod
    def from_domain(cls, session: TrainingSession) -> "SessionResponse":
        return cls(
            id=session.id,
            client_id=session.client_id,
            trainer_id=session.trainer_id,
            session_date=session.session_date,
            notes=session.notes,
            duration_minutes=session.duration_minutes,
            paid=session.paid,
        )


# ---------------------------------------------------------------------------
# Trainer
# ---------------------------------------------------------------------------

class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    display_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, trainer: Trainer) -> "UserResponse":
        return cls(
            id=trainer.id,
            email=trainer.email,
            first_name=trainer.first_name,
            last_name=trainer.last_name,
            profile_image_url=trainer.profile_image_url,
            display_name=trainer.display_name,
            created_at=trainer.created_at,
            updated_at=trainer.updated_at,
        )


class DashboardResponse(CamelModel):
    """Headline numbers for the trainer's home screen."""
    active_clients: int
    total_sessions: int
    unpaid_sessions: int
    outstanding_balance: int = Field(description="Sum of session costs of unpaid sessions")
    all_paid: bool

    @classmethod
    def from_summary(cls, summary: PaymentSummary) -> "DashboardResponse":
        return cls(
            active_clients=summary.active_clients,
            total_sessions=summary.total_sessions,
            unpaid_sessions=summary.unpaid_sessions,
            outstanding_balance=summary.outstanding_balance,
            all_paid=summary.all_paid,
        )
