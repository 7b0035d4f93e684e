"""
Signed-in trainer endpoints.

The web client calls GET /api/me after the identity provider signs the
trainer in. That call doubles as the sync point: the provider's claims
are upserted into our users table so clients and sessions always have
an owner row to point at.
"""

import logging

from fastapi import APIRouter, status

from ..dependencies import CurrentTrainer, UserRepositoryDep
from ..schemas import ErrorResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get the signed-in trainer",
    description="Returns the trainer's profile, refreshed from the identity provider's claims",
    responses={401: {"model": ErrorResponse}},
)
async def get_me(
    trainer: CurrentTrainer,
    repository: UserRepositoryDep,
) -> UserResponse:
    stored = repository.upsert_user(trainer)

    logger.info(
        "Synced trainer profile",
        extra={"user_id": stored.id}
    )

    return UserResponse.from_domain(stored)
