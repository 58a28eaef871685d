"""Error handling utilities for request and domain errors."""
from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

from ...domain.errors import FieldOpsError


def _error_body(message: str, status_code: int, details: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"message": message, "statusCode": status_code}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def create_validation_error_response(validation_error) -> JSONResponse:
    """Convert a pydantic or FastAPI request validation error to a 400 response."""
    errors = []

    for error in validation_error.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        error_type = error["type"]
        error_msg = error["msg"]

        # Map specific error types to user-friendly messages
        if error_type == "missing":
            error_msg = f"{field} is required"
        elif error_type == "finite_number":
            error_msg = f"{field} must be a finite number"
        elif error_type == "extra_forbidden":
            error_msg = f"unexpected field '{field}'"
        elif error_type == "enum":
            error_msg = f"{field} must be one of: {error.get('ctx', {}).get('expected', '')}"

        errors.append({
            "field": field,
            "error": error_msg
        })

    return JSONResponse(
        status_code=400,
        content=_error_body("Invalid request", 400, errors)
    )


def create_domain_error_response(exc: FieldOpsError) -> JSONResponse:
    """Map a domain error to its status code and message."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.status_code)
    )


def create_internal_error_response() -> JSONResponse:
    """Create standardized internal error response."""
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal error", 500)
    )
