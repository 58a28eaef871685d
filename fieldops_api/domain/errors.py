"""Domain error taxonomy for the field operations pipeline."""
from typing import Optional, Union


class FieldOpsError(Exception):
    """Base error carrying the HTTP status code it maps to."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FieldOpsError):
    """Malformed request shape, rejected before the core runs."""
    status_code = 400


class NotFoundError(FieldOpsError):
    """Requested resource does not exist."""
    status_code = 404

    def __init__(self, resource: str, resource_id: Optional[Union[int, str]] = None):
        if resource_id is not None:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(FieldOpsError):
    """Valid request whose precondition does not hold for the current state."""
    status_code = 409


class InfrastructureError(FieldOpsError):
    """Storage or configuration failure; always surfaced to the caller."""
    status_code = 500


class SessionVaultError(InfrastructureError):
    """Session payload could not be encrypted or decrypted."""


class PerItemExtractionError(FieldOpsError):
    """Extraction failure recorded against a single run item."""
    status_code = 422


class SharedSessionError(PerItemExtractionError):
    """Extraction failure caused by the shared automation session itself."""


class ServiceUnavailableError(FieldOpsError):
    """Feature is disabled or its collaborator is not configured."""
    status_code = 503
