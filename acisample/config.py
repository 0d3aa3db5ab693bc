"""Sample configuration.

Everything the walk-through needs is held in one immutable ``AciConfig``
that is passed to every operation. Values are layered, lowest first:

1. dataclass defaults
2. ``~/.acisample/defaults.toml`` (global)
3. ``acisample.toml`` in the project directory
4. environment variables (``AZURE_AUTH_LOCATION``, ``AZURE_SUBSCRIPTION_ID``,
   ``ACISAMPLE_REGION``)
5. explicit overrides (CLI flags)
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, TypeAlias

from acisample.core.exceptions import ConfigurationError
from acisample.names import (
    random_resource_name,
    validate_container_group_name,
    validate_resource_group_name,
)

RawConfig: TypeAlias = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".acisample" / "defaults.toml"
PROJECT_CONFIG_NAME = "acisample.toml"

AUTH_LOCATION_ENV = "AZURE_AUTH_LOCATION"
SUBSCRIPTION_ENV = "AZURE_SUBSCRIPTION_ID"
REGION_ENV = "ACISAMPLE_REGION"

DEFAULT_IMAGE = "mcr.microsoft.com/azuredocs/aci-helloworld"
DEFAULT_SIDECAR_IMAGE = "mcr.microsoft.com/azuredocs/aci-tutorial-sidecar"


def _resource_group_name() -> str:
    return random_resource_name("rg-aci-", 6)


def _container_group_name() -> str:
    return random_resource_name("aci-", 6)


_NONE = type(None)

# TOML and env values reach AciConfig unchecked; bools never count as numbers.
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "region": (str,),
    "auth_location": (str, _NONE),
    "subscription_id": (str, _NONE),
    "resource_group": (str,),
    "container_group": (str,),
    "image": (str,),
    "sidecar_image": (str,),
    "poll_interval": (int, float),
    "poll_timeout": (int, float, _NONE),
    "thread_pool_size": (int,),
    "delete_resource_group": (bool,),
}


def _check_type(name: str, value: object) -> None:
    expected = _FIELD_TYPES[name]
    if (isinstance(value, bool) and bool not in expected) or not isinstance(value, expected):
        names = " or ".join("None" if t is _NONE else t.__name__ for t in expected)
        raise ConfigurationError(
            f"{name} must be {names}, got {type(value).__name__} {value!r}"
        )


@dataclass(frozen=True, slots=True)
class AciConfig:
    """Configuration for the container instances walk-through.

    Example:
        >>> from acisample.config import AciConfig
        >>> config = AciConfig(region="westeurope", poll_timeout=600)

    Args:
        region: Azure region for every resource. Default: eastus.
        auth_location: Path to an SDK auth file. If None, falls back to
            DefaultAzureCredential.
        subscription_id: Subscription to use when no auth file provides one.
        resource_group: Resource group to create. Random ``rg-aci-xxxxxx`` if unset.
        container_group: Base name of the container groups. The multi-container
            group is named ``<container_group>-multi``.
        image: Image of the web container.
        sidecar_image: Image of the sidecar in the multi-container group.
        poll_interval: Seconds between readiness polls.
        poll_timeout: Seconds before a readiness poll gives up. None polls forever.
        thread_pool_size: Worker threads for the synchronous Azure SDK.
        delete_resource_group: Delete the resource group at the end, after
            asking. False keeps it without asking.
    """

    region: str = "eastus"
    auth_location: str | None = None
    subscription_id: str | None = None
    resource_group: str = field(default_factory=_resource_group_name)
    container_group: str = field(default_factory=_container_group_name)
    image: str = DEFAULT_IMAGE
    sidecar_image: str = DEFAULT_SIDECAR_IMAGE
    poll_interval: float = 1.0
    poll_timeout: float | None = None
    thread_pool_size: int = 4
    delete_resource_group: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_type(f.name, getattr(self, f.name))
        validate_resource_group_name(self.resource_group)
        validate_container_group_name(self.multi_container_group)
        if self.poll_interval < 0:
            raise ConfigurationError(f"poll_interval must be >= 0, got {self.poll_interval}")
        if self.poll_timeout is not None and self.poll_timeout <= 0:
            raise ConfigurationError(f"poll_timeout must be > 0, got {self.poll_timeout}")
        if self.thread_pool_size < 1:
            raise ConfigurationError(
                f"thread_pool_size must be >= 1, got {self.thread_pool_size}"
            )

    @property
    def multi_container_group(self) -> str:
        return f"{self.container_group}-multi"


_FIELDS = frozenset(f.name for f in fields(AciConfig))


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
    config_path: Path | None = None,
) -> RawConfig:
    """Read and merge the TOML config files.

    ``config_path`` replaces the project file lookup when given, and must exist.
    """
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)

    if config_path is not None:
        if not config_path.is_file():
            raise ConfigurationError(f"Config file not found: {config_path}")
        project_cfg = _read_toml(config_path)
    else:
        project_cfg = _read_toml((project_dir or Path.cwd()) / PROJECT_CONFIG_NAME)

    return _deep_merge(global_cfg, project_cfg)


def env_overrides(environ: Mapping[str, str] | None = None) -> RawConfig:
    env = os.environ if environ is None else environ
    mapping = {
        AUTH_LOCATION_ENV: "auth_location",
        SUBSCRIPTION_ENV: "subscription_id",
        REGION_ENV: "region",
    }
    return {key: env[var] for var, key in mapping.items() if env.get(var)}


def build_config(raw: RawConfig) -> AciConfig:
    unknown = sorted(set(raw) - _FIELDS)
    if unknown:
        raise ConfigurationError(
            f"Unknown config keys: {', '.join(unknown)}. Valid: {', '.join(sorted(_FIELDS))}"
        )
    try:
        return AciConfig(**raw)
    except TypeError as e:
        raise ConfigurationError(str(e)) from e


def resolve_config(
    overrides: Mapping[str, Any] | None = None,
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AciConfig:
    """Build the effective configuration. ``None`` overrides are ignored."""
    raw = load_config(project_dir=project_dir, global_path=global_path, config_path=config_path)
    raw = _deep_merge(raw, env_overrides(environ))
    raw = _deep_merge(raw, {k: v for k, v in (overrides or {}).items() if v is not None})
    return build_config(raw)
