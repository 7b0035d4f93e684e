"""
Training session endpoints.

Sessions are logged against one of the trainer's clients and carry a
paid flag the trainer toggles once the client settles up.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from ...infrastructure.snowflake.repositories.training import (
    ClientNotFoundError,
    SessionNotFoundError,
)
from ..dependencies import CurrentTrainer, TrainingRepositoryDep
from ..schemas import (
    ErrorResponse,
    SessionCreate,
    SessionPaidUpdate,
    SessionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=list[SessionResponse],
    summary="List sessions",
    description="All sessions of the signed-in trainer, most recent first",
)
async def list_sessions(
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> list[SessionResponse]:
    sessions = repository.get_sessions(trainer.id)

    logger.info(
        "Listed sessions",
        extra={"trainer_id": trainer.id, "count": len(sessions)}
    )

    return [SessionResponse.from_domain(s) for s in sessions]


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log session",
    responses={400: {"model": ErrorResponse}},
)
async def create_session(
    request: SessionCreate,
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> SessionResponse:
    """
    Log a session with one of the trainer's clients.

    Naming a client that doesn't exist, or that belongs to another
    trainer, is a validation error on clientId.
    """
    try:
        session = repository.create_session(trainer.id, request.model_dump())
    except ClientNotFoundError:
        logger.warning(
            "Session logged for unknown client",
            extra={"trainer_id": trainer.id, "client_id": str(request.client_id)}
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Client not found", "field": "clientId"},
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    logger.info(
        "Created session",
        extra={
            "trainer_id": trainer.id,
            "session_id": str(session.id),
            "client_id": str(session.client_id),
        }
    )

    return SessionResponse.from_domain(session)


@router.patch(
    "/{session_id}/paid",
    response_model=SessionResponse,
    summary="Set payment status",
    description="Mark a session paid or unpaid. Repeating the same value is harmless.",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def update_session_paid(
    session_id: UUID,
    request: SessionPaidUpdate,
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> SessionResponse:
    not_found = HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Session not found",
    )

    try:
        existing = repository.get_session(session_id)
        if existing.trainer_id != trainer.id:
            raise not_found
        session = repository.update_session_paid(session_id, request.paid)
    except SessionNotFoundError:
        raise not_found

    logger.info(
        "Updated session payment",
        extra={"session_id": str(session_id), "paid": session.paid}
    )

    return SessionResponse.from_domain(session)
