"""
Context API routes.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from commandstack.api.models import ContextRequest, ContextResponse
from commandstack.database import get_db
from commandstack.services import ContextService

router = APIRouter(prefix="/api/contexts", tags=["contexts"])


def get_context_service(db: Session = Depends(get_db)) -> ContextService:
    return ContextService(db)


@router.post("", response_model=ContextResponse, status_code=status.HTTP_201_CREATED)
def create_context(
    request: ContextRequest,
    service: ContextService = Depends(get_context_service),
):
    """Create a context; 409 if the namespace is taken."""
    return service.create_context(request.namespace, request.description, request.color)


@router.get("", response_model=list[ContextResponse])
def list_contexts(service: ContextService = Depends(get_context_service)):
    return service.get_all_contexts()


@router.get("/{context_id}", response_model=ContextResponse)
def get_context(context_id: UUID, service: ContextService = Depends(get_context_service)):
    return service.get_context(context_id)


@router.put("/{context_id}", response_model=ContextResponse)
def update_context(
    context_id: UUID,
    request: ContextRequest,
    service: ContextService = Depends(get_context_service),
):
    return service.update_context(
        context_id, request.namespace, request.description, request.color
    )


@router.delete("/{context_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_context(context_id: UUID, service: ContextService = Depends(get_context_service)):
    """Delete a context; 409 while commands or tasks still use it."""
    service.delete_context(context_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
