"""Container Instances walk-through.

Runs the whole sample against your subscription:

    resource group ──▶ single-container group ──▶ multi-container group
         │                                               │
         └──────── list ◀── details ◀── logs ◀───────────┘
                                  │
                               delete

Credentials come from the SDK auth file named by AZURE_AUTH_LOCATION
(``az ad sp create-for-rbac --sdk-auth > my.azureauth``) or, if unset,
from the default Azure credential chain.
"""

import asyncio

from acisample import AciConfig, run

if __name__ == "__main__":
    config = AciConfig(region="westeurope", poll_timeout=900)
    result = asyncio.run(run(config))
    print(f"Created {', '.join(h.name for h in result.created)} in {result.resource_group}")
