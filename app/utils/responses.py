"""
Standardized response utilities
"""

from typing import Any, Iterable, Optional
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.errors import ServiceError
from app.schemas.common import StandardResponse, ErrorResponse

def to_data(value: Any) -> Any:
    """JSON-ready data using the client-facing field names"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [to_data(item) for item in value]
    return value

def success_response(
    message: str,
    data: Any = None,
    status_code: int = 200
) -> JSONResponse:
    """Create standardized success response"""
    response = StandardResponse(
        success=True,
        message=message,
        data=to_data(data)
    )
    return JSONResponse(
        content=response.model_dump(),
        status_code=status_code
    )

def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Any = None,
    status_code: int = 400
) -> JSONResponse:
    """Create standardized error response"""
    response = ErrorResponse(
        message=message,
        error_code=error_code,
        details=details
    )
    return JSONResponse(
        content=response.model_dump(),
        status_code=status_code
    )

def service_error_response(exc: ServiceError) -> JSONResponse:
    """Map a service failure to its status code and error envelope"""
    return error_response(
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        status_code=exc.status_code
    )

def request_error_fields(errors: Iterable[dict]) -> list:
    """Dotted field paths from FastAPI request validation errors, minus the location prefix"""
    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc)
        if field and field not in fields:
            fields.append(field)
    return fields
