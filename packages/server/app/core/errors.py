"""
Domain error taxonomy.

Services raise these instead of HTTPException; the handler registered in
``app.main`` renders them as:

    {"error": {"code": "...", "message": "...", "status": 409}}
"""

from __future__ import annotations

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

from sitework_shared.schemas.common import ErrorBody, ErrorResponse

log = structlog.get_logger()


class DomainError(Exception):
    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        body = ErrorBody(code=self.code, message=self.message, status=self.status_code)
        return ErrorResponse(error=body).model_dump()


class NotFound(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(DomainError):
    code = "CONFLICT"
    status_code = 409


class DuplicateEdge(Conflict):
    code = "DUPLICATE_EDGE"


class CycleDetected(Conflict):
    code = "CYCLE_DETECTED"

    def __init__(self, message: str, path: list | None = None):
        super().__init__(message)
        self.path = path or []


class TaskBlocked(Conflict):
    code = "TASK_BLOCKED"

    def __init__(self, message: str, blocker_ids: list | None = None):
        super().__init__(message)
        self.blocker_ids = blocker_ids or []


class ValidationFailed(DomainError):
    code = "VALIDATION_FAILED"
    status_code = 422


class CrossTenantReference(ValidationFailed):
    code = "CROSS_TENANT_REFERENCE"


class CrossProjectReference(ValidationFailed):
    code = "CROSS_PROJECT_REFERENCE"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    log.info("request.domain_error", code=exc.code, status=exc.status_code, path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
