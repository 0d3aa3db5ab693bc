"""Conversion between acisample types and Azure SDK models."""

from __future__ import annotations

from typing import Any

from azure.mgmt.containerinstance.models import (
    Container,
    ContainerGroup,
    ContainerPort,
    IpAddress,
    Port,
    ResourceRequests,
    ResourceRequirements,
)

from acisample.model import ContainerGroupHandle, ContainerGroupSpec, ResourceGroupHandle


def to_container_group(spec: ContainerGroupSpec) -> ContainerGroup:
    """Build the SDK ContainerGroup body for ``spec``."""
    containers = [
        Container(
            name=c.name,
            image=c.image,
            resources=ResourceRequirements(
                requests=ResourceRequests(memory_in_gb=c.memory_gb, cpu=c.cpu),
            ),
            ports=[ContainerPort(port=p, protocol="TCP") for p in c.ports] or None,
        )
        for c in spec.containers
    ]

    ip_address = None
    if spec.dns_prefix:
        ip_address = IpAddress(
            ports=[Port(port=p, protocol="TCP") for p in spec.public_ports],
            type="Public",
            dns_name_label=spec.dns_prefix,
        )

    return ContainerGroup(
        location=spec.region,
        containers=containers,
        os_type=spec.os_type,
        restart_policy=spec.restart_policy,
        ip_address=ip_address,
    )


def to_handle(group: Any, resource_group: str) -> ContainerGroupHandle:
    """Snapshot an SDK ContainerGroup.

    ``state`` comes from the group instance view, which Azure only returns
    on a direct get and only once the group has been scheduled.
    """
    instance_view = getattr(group, "instance_view", None)
    ip_address = getattr(group, "ip_address", None)
    return ContainerGroupHandle(
        resource_group=resource_group,
        name=group.name,
        id=group.id or "",
        state=getattr(instance_view, "state", None),
        provisioning_state=getattr(group, "provisioning_state", None),
        fqdn=getattr(ip_address, "fqdn", None),
        ip=getattr(ip_address, "ip", None),
        region=getattr(group, "location", None),
        containers=tuple(c.name for c in (group.containers or ())),
    )


def to_resource_group_handle(group: Any) -> ResourceGroupHandle:
    properties = getattr(group, "properties", None)
    return ResourceGroupHandle(
        name=group.name,
        region=group.location,
        id=group.id or "",
        provisioning_state=getattr(properties, "provisioning_state", None),
    )
