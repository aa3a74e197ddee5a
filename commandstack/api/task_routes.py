"""
Task API routes.

Tasks flagged ``syncToGoogle`` are mirrored to the signed-in user's
Google Calendar. Without a session the flag is stored but nothing is
pushed.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from commandstack.api.dependencies import get_optional_user
from commandstack.api.models import StatusUpdateRequest, TaskRequest, TaskResponse
from commandstack.database import get_db
from commandstack.models import User
from commandstack.services import TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskRequest,
    service: TaskService = Depends(get_task_service),
    user: Optional[User] = Depends(get_optional_user),
):
    return service.create_task(
        syntax=request.syntax,
        context_id=request.context_id,
        details=request.details,
        type=request.type,
        deadline=request.deadline,
        sync_to_google=bool(request.sync_to_google),
        user=user,
    )


@router.get("", response_model=list[TaskResponse])
def list_tasks(
    filter: Optional[str] = Query(None, description="active or archived"),
    context_id: Optional[UUID] = Query(None, alias="contextId"),
    service: TaskService = Depends(get_task_service),
):
    """List tasks; ``contextId`` takes precedence over ``filter``."""
    return service.list_items(filter=filter, context_id=context_id)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: UUID, service: TaskService = Depends(get_task_service)):
    return service.get(task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: UUID,
    request: TaskRequest,
    service: TaskService = Depends(get_task_service),
    user: Optional[User] = Depends(get_optional_user),
):
    return service.update_task(
        task_id,
        syntax=request.syntax,
        context_id=request.context_id,
        details=request.details,
        type=request.type,
        deadline=request.deadline,
        sync_to_google=request.sync_to_google,
        user=user,
    )


@router.patch("/{task_id}/status", response_model=TaskResponse)
def update_task_status(
    task_id: UUID,
    request: StatusUpdateRequest,
    service: TaskService = Depends(get_task_service),
):
    """Move a task to a new status, stamping start/completion times."""
    return service.update_status(task_id, request.status)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: UUID,
    service: TaskService = Depends(get_task_service),
    user: Optional[User] = Depends(get_optional_user),
):
    service.delete_task(task_id, user=user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
