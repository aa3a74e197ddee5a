"""
Domain errors raised by the service layer.

Each error carries the HTTP status the API layer renders it with.
"""


class ServiceError(Exception):
    """Base error for service-layer failures."""

    status_code: int = 400
    error_type: str = "service_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Requested entity does not exist."""

    status_code = 404
    error_type = "not_found"

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found with id: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(ServiceError):
    """Request conflicts with existing state (duplicate namespace, in-use context)."""

    status_code = 409
    error_type = "conflict"
