"""
Command API routes.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from commandstack.api.models import CommandRequest, CommandResponse, StatusUpdateRequest
from commandstack.database import get_db
from commandstack.services import CommandService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/commands", tags=["commands"])


def get_command_service(db: Session = Depends(get_db)) -> CommandService:
    return CommandService(db)


@router.post("", response_model=CommandResponse, status_code=status.HTTP_201_CREATED)
def create_command(
    request: CommandRequest,
    service: CommandService = Depends(get_command_service),
):
    return service.create_command(
        syntax=request.syntax,
        context_id=request.context_id,
        details=request.details,
        type=request.type,
        deadline=request.deadline,
    )


@router.get("", response_model=list[CommandResponse])
def list_commands(
    filter: Optional[str] = Query(None, description="active or archived"),
    context_id: Optional[UUID] = Query(None, alias="contextId"),
    service: CommandService = Depends(get_command_service),
):
    """List commands; ``contextId`` takes precedence over ``filter``."""
    return service.list_items(filter=filter, context_id=context_id)


@router.get("/{command_id}", response_model=CommandResponse)
def get_command(command_id: UUID, service: CommandService = Depends(get_command_service)):
    return service.get(command_id)


@router.put("/{command_id}", response_model=CommandResponse)
def update_command(
    command_id: UUID,
    request: CommandRequest,
    service: CommandService = Depends(get_command_service),
):
    return service.update_command(
        command_id,
        syntax=request.syntax,
        context_id=request.context_id,
        details=request.details,
        type=request.type,
        deadline=request.deadline,
    )


@router.patch("/{command_id}/status", response_model=CommandResponse)
def update_command_status(
    command_id: UUID,
    request: StatusUpdateRequest,
    service: CommandService = Depends(get_command_service),
):
    """Move a command to a new status, stamping start/completion times."""
    return service.update_status(command_id, request.status)


@router.delete("/{command_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_command(command_id: UUID, service: CommandService = Depends(get_command_service)):
    service.delete_command(command_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
