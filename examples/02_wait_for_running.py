"""Wait for an existing container group to run.

Uses the readiness poller directly: find the group, then refresh it until
Azure reports ``Running``. Bounded by a timeout so a stuck group does not
block forever.

    python examples/02_wait_for_running.py rg-aci-abc123 aci-abc123
"""

import asyncio
import sys

from acisample import AciConfig, wait_for_existence, wait_for_state
from acisample.azure import AzureClient


async def main(resource_group: str, name: str) -> None:
    config = AciConfig(resource_group=resource_group)
    async with await AzureClient.create(config) as client:
        handle = await wait_for_existence(
            lambda: client.get_container_group(resource_group, name),
            interval=2.0,
            timeout=300,
            description=f"container group '{name}'",
        )
        handle = await wait_for_state(lambda: client.refresh(handle), timeout=600)
        print(f"{handle.name} is {handle.state} at {handle.url or handle.ip}")


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:3]))
