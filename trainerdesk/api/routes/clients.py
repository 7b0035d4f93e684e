"""
Client management endpoints.

A trainer only ever sees their own clients. Looking up, changing or
deleting somebody else's client answers 404, exactly as if the client
didn't exist, so ids can't be probed across accounts.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Response, status

from ...core.training.models import Client
from ...infrastructure.snowflake.repositories.training import (
    ClientNotFoundError,
    TrainingRepository,
)
from ..dependencies import CurrentTrainer, TrainingRepositoryDep
from ..schemas import ClientCreate, ClientResponse, ClientUpdate, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Client not found"}}


def load_owned_client(
    repository: TrainingRepository,
    client_id: UUID,
    trainer_id: str,
) -> Client:
    """Fetch a client, answering 404 unless it belongs to the trainer."""
    try:
        client = repository.get_client(client_id)
    except ClientNotFoundError:
        client = None

    if client is None or client.trainer_id != trainer_id:
        logger.warning(
            "Client not found for trainer",
            extra={"client_id": str(client_id), "trainer_id": trainer_id}
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )

    return client


@router.get(
    "",
    response_model=list[ClientResponse],
    summary="List clients",
    description="All clients of the signed-in trainer, oldest first",
)
async def list_clients(
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> list[ClientResponse]:
    clients = repository.get_clients(trainer.id)

    logger.info(
        "Listed clients",
        extra={"trainer_id": trainer.id, "count": len(clients)}
    )

    return [ClientResponse.from_domain(c) for c in clients]


@router.post(
    "",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add client",
    responses={400: {"model": ErrorResponse}},
)
async def create_client(
    request: ClientCreate,
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> ClientResponse:
    """
    Add a client to the signed-in trainer's roster.

    The id is generated server-side and the owner is always the caller;
    neither can be set from the body.
    """
    try:
        client = repository.create_client(trainer.id, request.model_dump())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    logger.info(
        "Created client",
        extra={"trainer_id": trainer.id, "client_id": str(client.id)}
    )

    return ClientResponse.from_domain(client)


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Get client",
    responses=NOT_FOUND,
)
async def get_client(
    client_id: UUID,
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> ClientResponse:
    client = load_owned_client(repository, client_id, trainer.id)
    return ClientResponse.from_domain(client)


@router.patch(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Update client",
    description="Change some of a client's details; omitted fields are left alone",
    responses={**NOT_FOUND, 400: {"model": ErrorResponse}},
)
async def update_client(
    client_id: UUID,
    request: ClientUpdate,
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> ClientResponse:
    load_owned_client(repository, client_id, trainer.id)

    changes = request.model_dump(exclude_unset=True)

    try:
        client = repository.update_client(client_id, changes)
    except ClientNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    logger.info(
        "Updated client",
        extra={"client_id": str(client_id), "fields": sorted(changes)}
    )

    return ClientResponse.from_domain(client)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete client",
    description="Delete a client together with all of their sessions",
    responses=NOT_FOUND,
)
async def delete_client(
    client_id: UUID,
    trainer: CurrentTrainer,
    repository: TrainingRepositoryDep,
) -> Response:
    load_owned_client(repository, client_id, trainer.id)

    try:
        repository.delete_client(client_id)
    except ClientNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Client not found",
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)
