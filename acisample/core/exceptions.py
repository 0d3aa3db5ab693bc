"""Custom exception hierarchy for acisample.

All acisample-specific exceptions inherit from AciSampleError, so the
CLI can report any of them with a single except clause.
"""

from __future__ import annotations


class AciSampleError(Exception):
    """Base exception for all acisample errors."""


class ConfigurationError(AciSampleError):
    """Raised for invalid configuration or missing required settings."""


class AuthenticationError(AciSampleError):
    """Raised when credentials cannot be loaded or are rejected by Azure."""

    def __init__(self, message: str, auth_location: str | None = None) -> None:
        self.auth_location = auth_location
        super().__init__(message)


class ResourceNotFoundError(AciSampleError):
    """Raised when a resource that must exist is gone."""

    def __init__(self, resource_group: str, name: str) -> None:
        self.resource_group = resource_group
        self.name = name
        super().__init__(f"Resource '{name}' not found in resource group '{resource_group}'")


class ProvisioningError(AciSampleError):
    """Raised when a resource reaches a state it will never recover from."""


class PollTimeoutError(AciSampleError):
    """Raised when the readiness poller runs out of time or attempts."""

    def __init__(self, description: str, attempts: int, last: object = None) -> None:
        self.description = description
        self.attempts = attempts
        self.last = last
        super().__init__(f"Timed out waiting for {description} after {attempts} attempts")


class PollCancelledError(AciSampleError):
    """Raised when a caller cancels a poll through its cancel event."""

    def __init__(self, description: str, attempts: int) -> None:
        self.description = description
        self.attempts = attempts
        super().__init__(f"Cancelled waiting for {description} after {attempts} attempts")
