"""
Payment bookkeeping over a trainer's clients and sessions.

A session doesn't carry its own price: it costs whatever its client's
session_cost is at the time we look. Clients without a cost (or sessions
whose client has since disappeared) contribute nothing to the balance.
"""

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from .models import Client, TrainingSession


@dataclass(frozen=True)
class PaymentSummary:
    """Headline numbers for a trainer's dashboard."""
    active_clients: int
    total_sessions: int
    unpaid_sessions: int
    outstanding_balance: int

    @property
    def all_paid(self) -> bool:
        return self.unpaid_sessions == 0


def unpaid_sessions(sessions: Iterable[TrainingSession]) -> list[TrainingSession]:
    return [s for s in sessions if not s.paid]


def session_price(session: TrainingSession, clients_by_id: dict[UUID, Client]) -> int:
    client = clients_by_id.get(session.client_id)
    if client is None or client.session_cost is None:
        return 0
    return client.session_cost


def outstanding_balance(
    clients: Iterable[Client],
    sessions: Iterable[TrainingSession],
) -> int:
    """Sum of the session cost of every unpaid session."""
    clients_by_id = {c.id: c for c in clients}
    return sum(session_price(s, clients_by_id) for s in unpaid_sessions(sessions))


def summarize_payments(
    clients: list[Client],
    sessions: list[TrainingSession],
) -> PaymentSummary:
    return PaymentSummary(
        active_clients=len(clients),
        total_sessions=len(sessions),
        unpaid_sessions=len(unpaid_sessions(sessions)),
        outstanding_balance=outstanding_balance(clients, sessions),
    )
