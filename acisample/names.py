"""Resource naming helpers."""

from __future__ import annotations

import re
import secrets
import string

from acisample.core.exceptions import ConfigurationError

_ALPHABET = string.ascii_lowercase + string.digits

# Container group names double as DNS labels in the sample.
_CONTAINER_GROUP_NAME = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_RESOURCE_GROUP_NAME = re.compile(r"^[-\w.()]{0,89}[-\w()]$")


def random_resource_name(prefix: str, length: int = 6) -> str:
    """Return ``prefix`` followed by ``length`` random lowercase characters.

    >>> name = random_resource_name("aci-")
    >>> name.startswith("aci-") and len(name) == 10
    True
    """
    if length < 1:
        raise ValueError(f"length must be >= 1, got {length}")
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix.lower()}{suffix}"


def validate_container_group_name(name: str) -> str:
    if not _CONTAINER_GROUP_NAME.match(name):
        raise ConfigurationError(
            f"Invalid container group name '{name}': use 1-63 lowercase letters, "
            "digits or hyphens, starting and ending with a letter or digit"
        )
    return name


def validate_resource_group_name(name: str) -> str:
    if not _RESOURCE_GROUP_NAME.match(name):
        raise ConfigurationError(
            f"Invalid resource group name '{name}': use up to 90 letters, digits, "
            "underscores, hyphens, periods or parentheses, not ending in a period"
        )
    return name
