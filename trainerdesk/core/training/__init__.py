"""
Client and session management for a training practice.

Contains the domain models and the payment ledger.
"""

from .models import (
    DEFAULT_SESSION_DURATION_MINUTES,
    Client,
    Trainer,
    TrainingSession,
)
from .ledger import PaymentSummary, outstanding_balance, summarize_payments

__all__ = [
    "DEFAULT_SESSION_DURATION_MINUTES",
    "Client",
    "Trainer",
    "TrainingSession",
    "PaymentSummary",
    "outstanding_balance",
    "summarize_payments",
]
