"""Custom exceptions for shipctl."""

from typing import Any


class ShipCtlError(Exception):
    """Base exception for all shipctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(ShipCtlError):
    """Configuration-related errors. Never retried."""

    pass


class BuildError(ShipCtlError):
    """A build tool exited non-zero or could not be started."""

    def __init__(
        self,
        message: str,
        builder: str | None = None,
        returncode: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.builder = builder
        self.returncode = returncode


class FallbackExhaustedError(ShipCtlError):
    """Every builder in the fallback chain failed.

    Only the last attempt's error is carried; earlier failures are logged
    as they happen.
    """

    def __init__(
        self,
        attempts: int,
        builders: list[str],
        last_error: Exception,
    ):
        super().__init__(f"all builders failed. Last error: {last_error}")
        self.attempts = attempts
        self.builders = builders
        self.last_error = last_error


class PortDetectionError(ShipCtlError):
    """Exposed ports could not be read from a built image."""

    pass


class TransferError(ShipCtlError):
    """Archive, upload or finalize failure in the remote build path."""

    pass


class RemoteAPIError(ShipCtlError):
    """Remote build service API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class PollTransientError(RemoteAPIError):
    """A single status poll failed; polling continues."""

    pass


class TimeoutError(ShipCtlError):
    """Operation timeout errors."""

    def __init__(
        self,
        message: str,
        timeout_seconds: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.timeout_seconds = timeout_seconds


class DeploymentFailedError(ShipCtlError):
    """A remote deployment reached the FAILED state."""

    def __init__(
        self,
        reason: str,
        deployment_id: str | None = None,
        service_name: str | None = None,
        branch: str | None = None,
        suggestions: list[str] | None = None,
    ):
        super().__init__(f"deployment failed: {reason}")
        self.reason = reason
        self.deployment_id = deployment_id
        self.service_name = service_name
        self.branch = branch
        self.suggestions = suggestions or []


class DeploymentCancelledError(ShipCtlError):
    """A remote deployment was cancelled."""

    def __init__(self, deployment_id: str | None = None):
        super().__init__("deployment was cancelled")
        self.deployment_id = deployment_id
