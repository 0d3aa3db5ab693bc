"""Authenticated session setup."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from azure.core.exceptions import AzureError
from rich.console import Console
from rich.markup import escape

from acisample.config import AUTH_LOCATION_ENV, AciConfig
from acisample.core.exceptions import AciSampleError, AuthenticationError
from acisample.model import Subscription
from acisample.observability.logger import logger

from .client import AzureClient

log = logger.bind(component="auth")

ClientFactory: TypeAlias = Callable[[AciConfig], Awaitable[AzureClient]]


@dataclass(frozen=True, slots=True)
class Session:
    """An authenticated client and the subscription it talks to."""

    client: AzureClient
    subscription: Subscription


async def authenticate(
    config: AciConfig,
    *,
    console: Console,
    client_factory: ClientFactory = AzureClient.create,
) -> Session:
    """Authenticate and confirm the credentials by reading the subscription.

    Failures are reported on ``console`` with a hint when no auth file was
    configured, then raised as AuthenticationError.
    """
    if config.auth_location:
        console.print(
            f"Authenticating with Azure using credentials in file at {config.auth_location}"
        )
    else:
        console.print("Authenticating with Azure using the default credential chain")

    client: AzureClient | None = None
    try:
        client = await client_factory(config)
        subscription = await client.subscription()
    except (AciSampleError, AzureError, ValueError) as e:
        if client is not None:
            await client.close()
        console.print(f"\n[red]Failed to authenticate:[/red]\n{escape(str(e))}", highlight=False)
        if not config.auth_location:
            console.print(f"Have you set the {AUTH_LOCATION_ENV} environment variable?")
        log.error("Authentication failed: {err}", err=e)
        if isinstance(e, AuthenticationError):
            raise
        raise AuthenticationError(str(e), config.auth_location) from e

    console.print(
        f"Authenticated with subscription '{subscription.display_name}' "
        f"(ID: {subscription.id})"
    )
    log.bind(subscription=subscription.id).info("Authenticated")
    return Session(client=client, subscription=subscription)
