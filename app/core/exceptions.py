"""Custom exception classes for the application."""

from typing import Any


class PressroomError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Validation Errors
class ValidationError(PressroomError):
    """Data validation failed."""

    pass


class InvalidStatusTransitionError(ValidationError):
    """Release status change is not allowed from the current status."""

    def __init__(self, current_status: str, target_status: str) -> None:
        super().__init__(
            f"Cannot change release status from {current_status} to {target_status}",
            details={"current_status": current_status, "target_status": target_status},
        )


# Not Found Errors
class NotFoundError(PressroomError):
    """Requested record does not exist."""

    pass


class ReleaseNotFoundError(NotFoundError):
    """Press release not found."""

    def __init__(self, release_id: str) -> None:
        super().__init__(f"Press release not found: {release_id}")


class OrganizationNotFoundError(NotFoundError):
    """Organization not found."""

    def __init__(self, org_id: str) -> None:
        super().__init__(f"Organization not found: {org_id}")


# Billing Errors
class QuotaExceededError(PressroomError):
    """Organization is over its plan limit."""

    def __init__(self, org_id: str, *, limit: int, used: int) -> None:
        super().__init__(
            f"Press release quota exceeded for organization: {org_id}",
            details={"limit": limit, "used": used},
        )


# Pipeline Errors
class GenerationError(PressroomError):
    """Unexpected failure inside one generation stage."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"Stage {stage} failed: {message}", details={"stage": stage})


# External API Errors
class ExternalAPIError(PressroomError):
    """Error calling external API."""

    def __init__(self, api_name: str, message: str) -> None:
        super().__init__(f"{api_name} API error: {message}")


class APIKeyMissingError(ExternalAPIError):
    """API key not configured."""

    def __init__(self, api_name: str) -> None:
        super().__init__(api_name, "API key not configured")
