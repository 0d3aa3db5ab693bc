"""acisample - an Azure Container Instances walk-through.

Example:

    import asyncio

    from acisample import AciConfig, run

    result = asyncio.run(run(AciConfig(region="westeurope", poll_timeout=600)))
    print(result.listed)

The readiness poller is usable on its own:

    from acisample import wait_for_state

    handle = await wait_for_state(lambda: client.refresh(handle), timeout=300)
"""

from acisample.config import AciConfig, load_config, resolve_config
from acisample.core.exceptions import (
    AciSampleError,
    AuthenticationError,
    ConfigurationError,
    PollCancelledError,
    PollTimeoutError,
    ProvisioningError,
    ResourceNotFoundError,
)
from acisample.model import (
    ContainerGroupHandle,
    ContainerGroupSpec,
    ContainerSpec,
    ResourceGroupHandle,
    Subscription,
)
from acisample.names import random_resource_name
from acisample.prompt import AutoPrompter, ConsolePrompter, Prompter, parse_confirmation
from acisample.tutorial import TutorialResult, Walkthrough, run
from acisample.wait import wait_for_existence, wait_for_ready, wait_for_state

__all__ = [
    "AciConfig",
    "AciSampleError",
    "AuthenticationError",
    "AutoPrompter",
    "ConfigurationError",
    "ConsolePrompter",
    "ContainerGroupHandle",
    "ContainerGroupSpec",
    "ContainerSpec",
    "PollCancelledError",
    "PollTimeoutError",
    "Prompter",
    "ProvisioningError",
    "ResourceGroupHandle",
    "ResourceNotFoundError",
    "Subscription",
    "TutorialResult",
    "Walkthrough",
    "load_config",
    "parse_confirmation",
    "random_resource_name",
    "resolve_config",
    "run",
    "wait_for_existence",
    "wait_for_ready",
    "wait_for_state",
]
