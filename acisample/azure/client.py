"""Azure Container Instances client.

Wraps the synchronous Azure management SDK clients and dispatches every
call to a dedicated thread pool, so the readiness poller and the
walk-through stay on one event loop. The client holds no resource state:
it hands out immutable handles and re-reads Azure on every call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from azure.core.exceptions import (
    HttpResponseError,
    ResourceNotFoundError,
    ServiceRequestError,
    ServiceResponseError,
)
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from acisample.config import AciConfig
from acisample.core.exceptions import AuthenticationError
from acisample.core.exceptions import ResourceNotFoundError as HandleNotFoundError
from acisample.model import (
    ContainerGroupHandle,
    ContainerGroupSpec,
    ResourceGroupHandle,
    Subscription,
)
from acisample.observability.logger import logger

from .auth import Credentials, load_credentials
from .convert import to_container_group, to_handle, to_resource_group_handle

T = TypeVar("T")

log = logger.bind(component="azure")

_TRANSIENT_STATUS = frozenset({408, 429, 500, 502, 503, 504})
_CALL_ATTEMPTS = 3


def is_transient(exc: BaseException) -> bool:
    """True for errors worth retrying: transport failures, throttling and 5xx."""
    match exc:
        case ServiceRequestError() | ServiceResponseError():
            return True
        case HttpResponseError(status_code=code) if code in _TRANSIENT_STATUS:
            return True
        case _:
            return False


@retry(
    retry=retry_if_exception(is_transient),
    stop=stop_after_attempt(_CALL_ATTEMPTS),
    wait=wait_exponential(multiplier=0.5, max=8),
    reraise=True,
)
def _call(fn: Callable[..., T], *args: object, **kwargs: object) -> T:
    return fn(*args, **kwargs)


def parse_container_group_id(resource_id: str) -> tuple[str, str]:
    """Split an ARM container group id into (resource group, name)."""
    from azure.mgmt.core.tools import is_valid_resource_id, parse_resource_id

    if not is_valid_resource_id(resource_id):
        raise ValueError(f"Not a valid Azure resource id: {resource_id!r}")
    parts = parse_resource_id(resource_id)
    if parts.get("type", "").lower() != "containergroups":
        raise ValueError(f"Not a container group id: {resource_id!r}")
    return parts["resource_group"], parts["name"]


class AzureClient:
    """Thin async facade over the resource and container instance SDKs."""

    def __init__(
        self,
        *,
        resources: Any,
        containers: Any,
        subscriptions: Any,
        subscription_id: str,
        thread_pool: ThreadPoolExecutor,
        credential: Any = None,
    ) -> None:
        self._resources = resources
        self._containers = containers
        self._subscriptions = subscriptions
        self._subscription_id = subscription_id
        self._pool = thread_pool
        self._credential = credential

    @property
    def subscription_id(self) -> str:
        return self._subscription_id

    async def _run(self, fn: Callable[..., T], *args: object, **kwargs: object) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._pool, lambda: _call(fn, *args, **kwargs))

    @classmethod
    async def create(cls, config: AciConfig, credentials: Credentials | None = None) -> AzureClient:
        from azure.mgmt.containerinstance import ContainerInstanceManagementClient
        from azure.mgmt.resource import ResourceManagementClient, SubscriptionClient

        creds = credentials or load_credentials(config)
        kwargs: dict[str, Any] = {"base_url": creds.base_url} if creds.base_url else {}

        thread_pool = ThreadPoolExecutor(
            max_workers=config.thread_pool_size,
            thread_name_prefix="azure-io",
        )
        subscriptions = SubscriptionClient(creds.credential, **kwargs)

        subscription_id = creds.subscription_id
        if not subscription_id:
            subscription_id = await _default_subscription(subscriptions, thread_pool)

        log.debug("Using subscription {sub}", sub=subscription_id)
        return cls(
            resources=ResourceManagementClient(creds.credential, subscription_id, **kwargs),
            containers=ContainerInstanceManagementClient(creds.credential, subscription_id, **kwargs),
            subscriptions=subscriptions,
            subscription_id=subscription_id,
            thread_pool=thread_pool,
            credential=creds.credential,
        )

    async def __aenter__(self) -> AzureClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        for sdk in (self._containers, self._resources, self._subscriptions, self._credential):
            close = getattr(sdk, "close", None)
            if close is not None:
                close()
        self._pool.shutdown(wait=False, cancel_futures=True)

    # -------------------------------------------------------------------------
    # Subscription
    # -------------------------------------------------------------------------

    async def subscription(self) -> Subscription:
        sub = await self._run(self._subscriptions.subscriptions.get, self._subscription_id)
        return Subscription(id=sub.subscription_id, display_name=sub.display_name)

    # -------------------------------------------------------------------------
    # Resource groups
    # -------------------------------------------------------------------------

    async def create_resource_group(self, name: str, region: str) -> ResourceGroupHandle:
        group = await self._run(
            self._resources.resource_groups.create_or_update,
            name,
            {"location": region},
        )
        log.info("Resource group {rg} created in {region}", rg=name, region=region)
        return to_resource_group_handle(group)

    async def resource_group_exists(self, name: str) -> bool:
        return bool(await self._run(self._resources.resource_groups.check_existence, name))

    async def delete_resource_group(self, name: str) -> None:
        poller = await self._run(self._resources.resource_groups.begin_delete, name)
        await self._run(poller.result)
        log.info("Resource group {rg} deleted", rg=name)

    # -------------------------------------------------------------------------
    # Container groups
    # -------------------------------------------------------------------------

    async def create_container_group(self, spec: ContainerGroupSpec) -> ContainerGroupHandle:
        """Create ``spec`` and wait for Azure to accept the deployment."""
        body = to_container_group(spec)
        log.info(
            "Creating container group {cg} ({n} containers)",
            cg=spec.name, n=len(spec.containers),
        )
        poller = await self._run(
            self._containers.container_groups.begin_create_or_update,
            spec.resource_group,
            spec.name,
            body,
        )
        group = await self._run(poller.result)
        return to_handle(group, spec.resource_group)

    def begin_create_container_group(
        self, spec: ContainerGroupSpec,
    ) -> asyncio.Task[ContainerGroupHandle]:
        """Start creating ``spec`` in the background.

        The returned task must be awaited (or cancelled) by the caller. Its
        progress can be watched meanwhile with :meth:`get_container_group`.
        """
        return asyncio.create_task(
            self.create_container_group(spec), name=f"create-{spec.name}",
        )

    async def get_container_group(
        self, resource_group: str, name: str,
    ) -> ContainerGroupHandle | None:
        try:
            group = await self._run(self._containers.container_groups.get, resource_group, name)
        except ResourceNotFoundError:
            return None
        return to_handle(group, resource_group)

    async def refresh(self, handle: ContainerGroupHandle) -> ContainerGroupHandle:
        fresh = await self.get_container_group(handle.resource_group, handle.name)
        if fresh is None:
            raise HandleNotFoundError(handle.resource_group, handle.name)
        return fresh

    async def list_container_groups(self, resource_group: str) -> list[ContainerGroupHandle]:
        def _list() -> list[Any]:
            return list(self._containers.container_groups.list_by_resource_group(resource_group))

        groups = await self._run(_list)
        return [to_handle(g, resource_group) for g in groups]

    async def delete_container_group(self, resource_id: str) -> None:
        resource_group, name = parse_container_group_id(resource_id)
        poller = await self._run(
            self._containers.container_groups.begin_delete, resource_group, name,
        )
        await self._run(poller.result)
        log.info("Container group {cg} deleted", cg=name)

    async def container_logs(
        self,
        resource_group: str,
        name: str,
        container: str,
        *,
        tail: int | None = None,
    ) -> str:
        logs = await self._run(
            self._containers.containers.list_logs,
            resource_group,
            name,
            container,
            tail=tail,
        )
        return logs.content or ""


async def _default_subscription(subscriptions: Any, pool: ThreadPoolExecutor) -> str:
    loop = asyncio.get_running_loop()
    subs = await loop.run_in_executor(pool, lambda: list(subscriptions.subscriptions.list()))
    if not subs:
        raise AuthenticationError("No subscriptions available for these credentials")
    return subs[0].subscription_id
