"""Resource handles and container group definitions.

Handles are local, immutable snapshots of remote Azure resources. They are
never mutated: re-reading a resource through the client yields a new handle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

# Azure reports the container group state as a free-form string. These are
# the values the sample cares about; anything else counts as "not ready".
RUNNING = "Running"
PENDING = "Pending"
SUCCEEDED = "Succeeded"
FAILED = "Failed"
STOPPED = "Stopped"

TERMINAL_STATES = frozenset({FAILED, STOPPED})

OsType: TypeAlias = Literal["Linux", "Windows"]
RestartPolicy: TypeAlias = Literal["Always", "OnFailure", "Never"]


@dataclass(frozen=True, slots=True)
class ContainerSpec:
    """A single container inside a container group."""

    name: str
    image: str
    cpu: float = 1.0
    memory_gb: float = 1.0
    ports: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class ContainerGroupSpec:
    """Definition of a container group to create.

    Args:
        name: Container group name, unique within the resource group.
        resource_group: Existing resource group to create the group in.
        region: Azure region, e.g. ``eastus``.
        containers: One or more containers scheduled together.
        dns_prefix: DNS name label. When set, the group gets a public IP
            exposing every port declared by its containers.
        os_type: Container OS.
        restart_policy: Azure restart policy for the group.
    """

    name: str
    resource_group: str
    region: str
    containers: tuple[ContainerSpec, ...]
    dns_prefix: str | None = None
    os_type: OsType = "Linux"
    restart_policy: RestartPolicy = "Always"

    def __post_init__(self) -> None:
        if not self.containers:
            raise ValueError(f"Container group '{self.name}' needs at least one container")
        names = [c.name for c in self.containers]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate container names in '{self.name}': {names}")
        if self.dns_prefix and not self.public_ports:
            raise ValueError(f"Container group '{self.name}' has a DNS prefix but no ports")

    @property
    def public_ports(self) -> tuple[int, ...]:
        """Union of container ports, in declaration order."""
        seen: dict[int, None] = {}
        for container in self.containers:
            for port in container.ports:
                seen.setdefault(port, None)
        return tuple(seen)


@dataclass(frozen=True, slots=True)
class ResourceGroupHandle:
    name: str
    region: str
    id: str = ""
    provisioning_state: str | None = None


@dataclass(frozen=True, slots=True)
class ContainerGroupHandle:
    """Last-known state of a container group.

    ``state`` is the group's lifecycle state as reported by Azure
    (``Pending``, ``Running``, ...). It is None until Azure has an instance
    view for the group. ``fqdn`` and ``ip`` fill in as provisioning proceeds.
    """

    resource_group: str
    name: str
    id: str = ""
    state: str | None = None
    provisioning_state: str | None = None
    fqdn: str | None = None
    ip: str | None = None
    region: str | None = None
    containers: tuple[str, ...] = field(default=())

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES or self.provisioning_state == FAILED

    @property
    def url(self) -> str | None:
        return f"http://{self.fqdn}" if self.fqdn else None


@dataclass(frozen=True, slots=True)
class Subscription:
    id: str
    display_name: str
