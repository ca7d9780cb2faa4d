from __future__ import annotations


class ServiceError(Exception):
    """Base error for service-layer failures the API maps to an HTTP status."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class ResourceNotFoundError(ServiceError):
    """Raised when an owned row does not exist (or belongs to someone else)."""

    def __init__(self, resource: str, resource_id: int | str) -> None:
        error_code = resource.lower().replace(" ", "_") + "_not_found"
        super().__init__(f"{resource} {resource_id} not found", error_code)
        self.resource = resource
        self.resource_id = resource_id
