"""Container instances walk-through.

Runs the sample end to end: authenticate, create a resource group, create a
single-container and a multi-container group, list and inspect them, print
container logs, then delete everything the user agrees to delete. Every
step narrates its progress on a rich console.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from acisample.azure.client import AzureClient, is_transient
from acisample.azure.session import authenticate
from acisample.config import AciConfig
from acisample.core.exceptions import ProvisioningError
from acisample.model import (
    ContainerGroupHandle,
    ContainerGroupSpec,
    ContainerSpec,
    ResourceGroupHandle,
)
from acisample.observability.logger import logger
from acisample.prompt import ConsolePrompter, Prompter
from acisample.wait import wait_for_existence, wait_for_state

log = logger.bind(component="tutorial")

WEB_PORT = 80


@dataclass(frozen=True, slots=True)
class TutorialResult:
    resource_group: str
    created: tuple[ContainerGroupHandle, ...]
    listed: tuple[str, ...]
    details: ContainerGroupHandle | None
    logs: str | None
    deleted: tuple[str, ...]
    resource_group_deleted: bool


def single_container_spec(config: AciConfig) -> ContainerGroupSpec:
    name = config.container_group
    return ContainerGroupSpec(
        name=name,
        resource_group=config.resource_group,
        region=config.region,
        containers=(
            ContainerSpec(
                name=f"{name}-1", image=config.image, cpu=1.0, memory_gb=1.0, ports=(WEB_PORT,),
            ),
        ),
        dns_prefix=name,
    )


def multi_container_spec(config: AciConfig) -> ContainerGroupSpec:
    name = config.multi_container_group
    return ContainerGroupSpec(
        name=name,
        resource_group=config.resource_group,
        region=config.region,
        containers=(
            ContainerSpec(
                name=f"{name}-1", image=config.image, cpu=0.5, memory_gb=1.0, ports=(WEB_PORT,),
            ),
            ContainerSpec(
                name=f"{name}-2", image=config.sidecar_image, cpu=0.5, memory_gb=1.0,
            ),
        ),
        dns_prefix=name,
    )


class Walkthrough:
    """The individual steps of the sample, bound to one config and client."""

    def __init__(
        self,
        config: AciConfig,
        client: AzureClient,
        *,
        console: Console,
        prompter: Prompter,
        cancel: asyncio.Event | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._client = client
        self._console = console
        self._prompter = prompter
        self._cancel = cancel
        self._sleep = sleep

    def _say(self, message: str, **kwargs: Any) -> None:
        self._console.print(escape(message), highlight=False, **kwargs)

    def _dot(self, attempt: int, result: object) -> None:
        self._console.print(".", end="")

    def _poll_options(self, *, progress: bool = False) -> dict[str, Any]:
        return {
            "interval": self._config.poll_interval,
            "timeout": self._config.poll_timeout,
            "cancel": self._cancel,
            "retry_on": is_transient,
            "sleep": self._sleep,
            "on_attempt": self._dot if progress else None,
        }

    async def find(self, name: str) -> ContainerGroupHandle:
        """Poll until container group ``name`` is visible in the resource group."""
        group = self._config.resource_group
        return await wait_for_existence(
            lambda: self._client.get_container_group(group, name),
            description=f"container group '{name}'",
            **self._poll_options(progress=True),
        )

    async def create_resource_group(self) -> ResourceGroupHandle:
        name = self._config.resource_group
        self._say(f"\nCreating resource group '{name}'...")
        return await self._client.create_resource_group(name, self._config.region)

    async def create_container_group(self, spec: ContainerGroupSpec) -> ContainerGroupHandle:
        kind = "multi-container container group" if len(spec.containers) > 1 else "container group"
        self._say(f"\nCreating {kind} '{spec.name}'", end="")

        task = self._client.begin_create_container_group(spec)

        async def poll() -> ContainerGroupHandle | None:
            # The creation task is authoritative; lookups only report progress.
            # Its failure is final even when the underlying error is transient.
            if task.done():
                try:
                    return task.result()
                except Exception as e:
                    raise ProvisioningError(
                        f"Creating container group '{spec.name}' failed: {e}"
                    ) from e
            return await self._client.get_container_group(spec.resource_group, spec.name)

        try:
            await wait_for_existence(
                poll,
                description=f"container group '{spec.name}'",
                **self._poll_options(progress=True),
            )
            handle = await task
        finally:
            if not task.done():
                task.cancel()

        self._console.print()
        self._say(f"Container group '{handle.name}' will be reachable at {handle.url}")
        return handle

    async def list_container_groups(self) -> list[ContainerGroupHandle]:
        group = self._config.resource_group
        self._say(f"\nListing container groups in resource group '{group}'...")
        groups = await self._client.list_container_groups(group)
        for cg in groups:
            self._say(cg.name)
        return groups

    async def print_details(self, name: str) -> ContainerGroupHandle:
        self._say(f"\nGetting container group details for container group '{name}'", end="")
        handle = await self.find(name)
        handle = await wait_for_state(
            lambda: self._client.refresh(handle),
            description=f"container group '{name}' to run",
            **self._poll_options(progress=True),
        )
        self._console.print()

        table = Table(title=handle.name, show_header=False, box=None, title_justify="left")
        table.add_column(style="bold")
        table.add_column()
        table.add_row("State:", handle.state or "")
        table.add_row("FQDN:", handle.fqdn or "")
        table.add_row("IP:", handle.ip or "")
        table.add_row("Region:", handle.region or "")
        self._console.print(table)
        return handle

    async def print_logs(self, name: str, *, tail: int | None = None) -> str:
        handle = await self.find(name)
        self._console.print()
        if not handle.containers:
            self._say(f"Container group '{name}' has no containers")
            return ""

        container = handle.containers[0]
        self._say(f"Logs for container '{container}':")
        content = await self._client.container_logs(
            handle.resource_group, handle.name, container, tail=tail,
        )
        self._say(content or "(no output yet)")
        return content

    async def delete_container_group(self, name: str) -> str:
        self._prompter.pause(f"Press ENTER to delete container group '{name}':")
        self._say("Waiting for container group", end="")
        handle = await self.find(name)
        self._console.print()
        self._say(f"Deleting container group '{name}'...")
        await self._client.delete_container_group(handle.id)
        return handle.id

    async def delete_resource_group(self) -> bool:
        name = self._config.resource_group
        if not self._config.delete_resource_group:
            self._say(f"\nKeeping resource group '{name}'")
            return False
        if not self._prompter.confirm(f"Delete resource group '{name}'?"):
            return False
        self._say(f"\nDeleting resource group '{name}'...")
        await self._client.delete_resource_group(name)
        return True

    async def run(self) -> TutorialResult:
        config = self._config
        log.bind(resource_group=config.resource_group).info("Starting walk-through")

        await self.create_resource_group()

        created = (
            await self.create_container_group(single_container_spec(config)),
            await self.create_container_group(multi_container_spec(config)),
        )
        listed = await self.list_container_groups()
        details = await self.print_details(config.container_group)
        logs = await self.print_logs(config.container_group)

        deleted = (
            await self.delete_container_group(config.container_group),
            await self.delete_container_group(config.multi_container_group),
        )

        rg_deleted = await self.delete_resource_group()
        self._prompter.pause("Press ENTER to exit...")

        return TutorialResult(
            resource_group=config.resource_group,
            created=created,
            listed=tuple(g.name for g in listed),
            details=details,
            logs=logs,
            deleted=deleted,
            resource_group_deleted=rg_deleted,
        )


async def run(
    config: AciConfig,
    *,
    client: AzureClient | None = None,
    prompter: Prompter | None = None,
    console: Console | None = None,
    cancel: asyncio.Event | None = None,
) -> TutorialResult:
    """Run the walk-through.

    Authenticates from ``config`` unless a client is given. A client created
    here is closed on return; an injected one is left open.
    """
    console = console or Console()
    prompter = prompter or ConsolePrompter(console)

    owned = client is None
    if client is None:
        client = (await authenticate(config, console=console)).client

    try:
        return await Walkthrough(
            config, client, console=console, prompter=prompter, cancel=cancel,
        ).run()
    finally:
        if owned:
            await client.close()
