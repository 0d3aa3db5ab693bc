"""Azure Container Instances collaborator.

Environment Variables:
    AZURE_AUTH_LOCATION: Path to an SDK auth file (optional)
    AZURE_SUBSCRIPTION_ID: Subscription to use without an auth file (optional)
"""

from .auth import AuthFile, Credentials, load_credentials, read_auth_file
from .client import AzureClient, is_transient, parse_container_group_id
from .session import Session, authenticate

__all__ = [
    "AuthFile",
    "AzureClient",
    "Credentials",
    "Session",
    "authenticate",
    "is_transient",
    "load_credentials",
    "parse_container_group_id",
    "read_auth_file",
]
