from .exceptions import (
    AciSampleError,
    AuthenticationError,
    ConfigurationError,
    PollCancelledError,
    PollTimeoutError,
    ProvisioningError,
    ResourceNotFoundError,
)

__all__ = [
    "AciSampleError",
    "AuthenticationError",
    "ConfigurationError",
    "PollCancelledError",
    "PollTimeoutError",
    "ProvisioningError",
    "ResourceNotFoundError",
]
