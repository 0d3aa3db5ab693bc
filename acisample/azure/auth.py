"""Azure credentials.

Two sources are supported:

* An SDK auth file named by ``AZURE_AUTH_LOCATION`` (or ``auth_location`` in
  the config). Create one with the Azure CLI::

      az ad sp create-for-rbac --sdk-auth > my.azureauth

  The file's service principal is used through ``ClientSecretCredential``
  and its ``subscriptionId`` selects the subscription.

* Otherwise ``DefaultAzureCredential`` (environment, managed identity,
  ``az login``...) with ``AZURE_SUBSCRIPTION_ID`` or the account's first
  subscription.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from acisample.config import AUTH_LOCATION_ENV, AciConfig
from acisample.core.exceptions import AuthenticationError
from acisample.observability.logger import logger

log = logger.bind(component="auth")

_REQUIRED_KEYS = ("clientId", "clientSecret", "tenantId", "subscriptionId")


@dataclass(frozen=True, slots=True)
class AuthFile:
    """Contents of an SDK auth file."""

    client_id: str
    client_secret: str
    tenant_id: str
    subscription_id: str
    authority: str | None = None
    resource_manager_url: str | None = None


@dataclass(frozen=True, slots=True)
class Credentials:
    credential: Any
    subscription_id: str | None
    base_url: str | None = None
    source: str = "default"


def read_auth_file(path: str | Path) -> AuthFile:
    """Parse an SDK auth file.

    Raises:
        AuthenticationError: If the file is missing, not JSON, or lacks
            one of the service principal fields.
    """
    file = Path(path).expanduser()
    try:
        raw = json.loads(file.read_text(encoding="utf-8-sig"))
    except FileNotFoundError as e:
        raise AuthenticationError(f"Auth file not found: {file}", str(path)) from e
    except OSError as e:
        raise AuthenticationError(f"Cannot read auth file {file}: {e.strerror or e}", str(path)) from e
    except UnicodeDecodeError as e:
        raise AuthenticationError(f"Auth file {file} is not UTF-8 text", str(path)) from e
    except json.JSONDecodeError as e:
        raise AuthenticationError(f"Auth file {file} is not valid JSON: {e}", str(path)) from e

    if not isinstance(raw, dict):
        raise AuthenticationError(f"Auth file {file} must contain a JSON object", str(path))

    missing = [k for k in _REQUIRED_KEYS if not raw.get(k)]
    if missing:
        raise AuthenticationError(
            f"Auth file {file} is missing {', '.join(missing)}", str(path),
        )

    authority = raw.get("activeDirectoryEndpointUrl")
    return AuthFile(
        client_id=raw["clientId"],
        client_secret=raw["clientSecret"],
        tenant_id=raw["tenantId"],
        subscription_id=raw["subscriptionId"],
        authority=(urlparse(authority).netloc or authority) if authority else None,
        resource_manager_url=raw.get("resourceManagerEndpointUrl"),
    )


def load_credentials(config: AciConfig) -> Credentials:
    """Build an Azure credential for ``config``."""
    from azure.identity import ClientSecretCredential, DefaultAzureCredential

    if config.auth_location:
        auth = read_auth_file(config.auth_location)
        kwargs = {"authority": auth.authority} if auth.authority else {}
        log.debug(
            "Using service principal {client} from {path}",
            client=auth.client_id, path=config.auth_location,
        )
        return Credentials(
            credential=ClientSecretCredential(
                tenant_id=auth.tenant_id,
                client_id=auth.client_id,
                client_secret=auth.client_secret,
                **kwargs,
            ),
            subscription_id=auth.subscription_id,
            base_url=auth.resource_manager_url,
            source="auth-file",
        )

    log.debug("No {env} set, using DefaultAzureCredential", env=AUTH_LOCATION_ENV)
    return Credentials(
        credential=DefaultAzureCredential(),
        subscription_id=config.subscription_id,
    )
