"""Configuration models and helpers for cibuild.

A payload is what a job scheduler hands over for one build job:
- config: the user's build spec (language, env, stage commands, ...)
- env_vars: variables defined in repository settings
- paranoid / skip_*: worker-level switches
- hosts: infrastructure endpoints (e.g. an APT cache proxy)
- repository / job: what to check out

CompileOptions only change how the compiler behaves, never the build.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, Field


class EnvVarSetting(BaseModel):
    """A variable defined in repository settings."""

    name: str
    value: str
    public: bool = False


class Payload(BaseModel):
    """Input for one compile."""

    model_config = {"populate_by_name": True}

    config: dict[str, Any] = Field(
        default_factory=dict, description="User build spec (e.g. .cibuild.yml)"
    )
    env_vars: list[EnvVarSetting] = Field(
        default_factory=list, description="Repository settings variables"
    )
    paranoid: bool = Field(default=False, description="Disable sudo and setuid")
    skip_resolv_updates: bool = False
    skip_etc_hosts_fix: bool = False
    hosts: dict[str, str] = Field(
        default_factory=dict, description="Infrastructure hosts (e.g. apt_cache)"
    )
    cache_options: dict[str, Any] = Field(
        default_factory=dict, description="Directory cache backend settings"
    )
    repository: dict[str, Any] = Field(
        default_factory=dict, description="Repository under test (slug, source_url)"
    )
    job: dict[str, Any] = Field(
        default_factory=dict, description="Job ref info (branch, commit, ref)"
    )


class CompileOptions(BaseModel):
    """Compiler behaviour switches (not build behaviour)."""

    templates_dir: Path | None = Field(
        default=None, description="Directory with alternate header/footer templates"
    )
    log_ast: bool = Field(
        default=False, description="Debug-log the script AST as JSON"
    )


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested mappings are merged key by key; any other value in ``override``
    (lists included) replaces the one in ``base``. Inputs are not modified.
    """
    result: dict[str, Any] = {}
    for key, value in base.items():
        result[key] = _thaw(value)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = _thaw(value)
    return result


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


def freeze(value: Any) -> Any:
    """Return a read-only deep copy: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def payload_from_dict(data: Mapping[str, Any]) -> Payload:
    if not isinstance(data, Mapping):
        raise TypeError("Payload must be a mapping at the top level")
    if "config" in data:
        return Payload(**data)
    return Payload(config=dict(data))
