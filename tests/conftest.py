from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import replace

import pytest

from acisample.config import AciConfig
from acisample.core.exceptions import ResourceNotFoundError
from acisample.model import (
    ContainerGroupHandle,
    ContainerGroupSpec,
    ResourceGroupHandle,
    Subscription,
)


class FakeTime:
    """Deterministic clock whose sleep only advances virtual time."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


class Sequenced:
    """Async poll function returning scripted results, then repeating the last."""

    def __init__(self, results: Iterable[object]) -> None:
        self._results = list(results)
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        index = min(self.calls, len(self._results)) - 1
        item = self._results[index]
        if isinstance(item, Exception):
            raise item
        return item


def handle(name: str = "aci-abc123", state: str | None = None, **kwargs) -> ContainerGroupHandle:
    defaults = {
        "resource_group": "rg-aci-test01",
        "name": name,
        "id": (
            "/subscriptions/00000000-0000-0000-0000-000000000000/resourceGroups/rg-aci-test01"
            f"/providers/Microsoft.ContainerInstance/containerGroups/{name}"
        ),
        "state": state,
    }
    defaults.update(kwargs)
    return ContainerGroupHandle(**defaults)


class FakeAzureClient:
    """In-memory stand-in for AzureClient.

    Container groups become visible ``visible_after`` lookups after creation
    and report ``Running`` after ``running_after`` further lookups.
    """

    def __init__(self, *, visible_after: int = 0, running_after: int = 0) -> None:
        self.visible_after = visible_after
        self.running_after = running_after
        self.groups: dict[str, ContainerGroupHandle] = {}
        self.lookups: dict[str, int] = {}
        self.resource_groups: dict[str, ResourceGroupHandle] = {}
        self.deleted: list[str] = []
        self.deleted_resource_groups: list[str] = []
        self.closed = False
        self.logs = "listening on port 80\n"

    async def subscription(self) -> Subscription:
        return Subscription(id="00000000-0000-0000-0000-000000000000", display_name="Test")

    async def create_resource_group(self, name: str, region: str) -> ResourceGroupHandle:
        rg = ResourceGroupHandle(name=name, region=region, id=f"/rg/{name}", provisioning_state="Succeeded")
        self.resource_groups[name] = rg
        return rg

    async def delete_resource_group(self, name: str) -> None:
        self.resource_groups.pop(name, None)
        self.deleted_resource_groups.append(name)

    async def create_container_group(self, spec: ContainerGroupSpec) -> ContainerGroupHandle:
        created = handle(
            spec.name,
            state="Pending",
            resource_group=spec.resource_group,
            provisioning_state="Creating",
            fqdn=f"{spec.dns_prefix}.{spec.region}.azurecontainer.io" if spec.dns_prefix else None,
            ip="20.0.0.1",
            region=spec.region,
            containers=tuple(c.name for c in spec.containers),
        )
        self.groups[spec.name] = created
        self.lookups[spec.name] = 0
        return created

    def begin_create_container_group(self, spec: ContainerGroupSpec) -> asyncio.Task[ContainerGroupHandle]:
        return asyncio.create_task(self.create_container_group(spec))

    async def get_container_group(self, resource_group: str, name: str) -> ContainerGroupHandle | None:
        if name not in self.groups:
            return None
        self.lookups[name] += 1
        seen = self.lookups[name]
        if seen <= self.visible_after:
            return None
        group = self.groups[name]
        if seen > self.visible_after + self.running_after:
            group = replace(group, state="Running", provisioning_state="Succeeded")
        return group

    async def refresh(self, h: ContainerGroupHandle) -> ContainerGroupHandle:
        fresh = await self.get_container_group(h.resource_group, h.name)
        if fresh is None:
            raise ResourceNotFoundError(h.resource_group, h.name)
        return fresh

    async def list_container_groups(self, resource_group: str) -> list[ContainerGroupHandle]:
        return [g for g in self.groups.values() if g.resource_group == resource_group]

    async def delete_container_group(self, resource_id: str) -> None:
        name = resource_id.rsplit("/", 1)[-1]
        self.groups.pop(name)
        self.deleted.append(resource_id)

    async def container_logs(self, resource_group: str, name: str, container: str, *, tail=None) -> str:
        return self.logs

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def config() -> AciConfig:
    return AciConfig(
        region="eastus",
        resource_group="rg-aci-test01",
        container_group="aci-abc123",
        poll_interval=0.0,
    )
