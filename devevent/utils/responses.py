"""
Standardized response utilities
"""

from typing import Any, Dict, Optional
from fastapi.responses import JSONResponse

from devevent.core.errors import DomainError, EventValidationError
from devevent.schemas.common import ErrorResponse

def message_response(
    message: str,
    status_code: int = 200,
    **payload: Any
) -> JSONResponse:
    """Create a ``{message, ...payload}`` response"""
    return JSONResponse(
        content={"message": message, **payload},
        status_code=status_code
    )

def error_response(
    message: str,
    error: Optional[str] = None,
    errors: Optional[Dict[str, str]] = None,
    status_code: int = 400
) -> JSONResponse:
    """Create a ``{message, error?, errors?}`` response"""
    response = ErrorResponse(
        message=message,
        error=error,
        errors=errors
    )
    return JSONResponse(
        content=response.model_dump(exclude_none=True),
        status_code=status_code
    )

def domain_error_response(exc: DomainError) -> JSONResponse:
    """Map a domain error to its HTTP response"""
    return error_response(
        message=exc.message,
        error=exc.code.value,
        errors=exc.errors if isinstance(exc, EventValidationError) else None,
        status_code=exc.status_code
    )
