"""
Dashboard endpoint.

Gives the home screen its headline numbers in one call: how many
clients, how many sessions, and how much is still owed.
"""

import logging

from fastapi import APIRouter

from ...core.training.ledger import summarize_payments
from ..dependencies import CurrentTrainer, TrainingRepositoryDep
from ..schemas import DashboardResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=DashboardResponse,
    summary="Practice overview",
    description="Client and session counts plus the outstanding balance of unpaid sessions",
)
async def get_dashboard(
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> DashboardResponse:
    summary = summarize_payments(
        repository.get_clients(trainer.id),
        repository.get_sessions(trainer.id),
    )

    logger.info(
        "Built dashboard",
        extra={
            "trainer_id": trainer.id,
            "unpaid_sessions": summary.unpaid_sessions,
            "outstanding_balance": summary.outstanding_balance,
        }
    )

    return DashboardResponse.from_summary(summary)
