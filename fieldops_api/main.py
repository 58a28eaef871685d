"""FastAPI application entrypoint for fieldops-api."""
import logging
from typing import Any, Dict

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

# Load environment variables from .env file
load_dotenv()

from .config.config import get_log_level
from .domain.errors import FieldOpsError
from .presentation.dtos.errors import (
    create_domain_error_response,
    create_internal_error_response,
    create_validation_error_response,
)
from .presentation.routers.extraction_router import router as extraction_router
from .presentation.routers.property_router import router as property_router
from .presentation.routers.queue_router import router as queue_router

# Configure logging
logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="fieldops-api")

# Include routers
app.include_router(queue_router)
app.include_router(property_router)
app.include_router(extraction_router)


@app.get("/health", status_code=200)
def health() -> Dict[str, Any]:
    return {"status": "ok"}


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request, exc: RequestValidationError):
    """Handle request body and parameter validation errors."""
    logger.warning(f"Request validation error on {request.url.path}: {exc.errors()}")
    return create_validation_error_response(exc)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request, exc: ValidationError):
    """Handle Pydantic validation errors."""
    logger.error(f"Pydantic validation error on {request.url.path}: {exc.errors()}")
    return create_validation_error_response(exc)


@app.exception_handler(FieldOpsError)
async def domain_exception_handler(request, exc: FieldOpsError):
    """Map domain errors to their status codes."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return create_domain_error_response(exc)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}")
    return create_internal_error_response()
