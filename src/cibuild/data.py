"""Read-only view over a resolved payload, as consumed by the stages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from cibuild.config import Payload, freeze

# KEY=value where value is "double quoted", 'single quoted', $(a subshell)
# or a bare word. Quotes are kept: the value is shell text. A leading
# "SECURE " marks a value decrypted upstream.
ENV_VAR_PATTERN = re.compile(
    r"""(SECURE\s+)?([A-Za-z_][A-Za-z0-9_]*)=("(?:\\.|[^"])*"|'[^']*'|\$\([^)]*\)|[^\s"']*)"""
)

REPOSITORY_SETTINGS = "repository settings"
CONFIG_FILE = ".cibuild.yml"


@dataclass(frozen=True)
class EnvVar:
    key: str
    value: str
    secure: bool = False
    echo: bool = True


@dataclass(frozen=True)
class EnvVarGroup:
    """Variables from one source, exported in declaration order."""

    source: str
    vars: Tuple[EnvVar, ...] = ()

    @property
    def announce(self) -> bool:
        return bool(self.vars)


def parse_env(line: str, secure: bool = False) -> list[EnvVar]:
    """Parse ``"A=1 B='x y'"`` into EnvVars, keeping declaration order."""
    return [
        EnvVar(key=key, value=value, secure=secure or bool(prefix))
        for prefix, key, value in ENV_VAR_PATTERN.findall(str(line))
    ]


def _config_env_entries(env: Any) -> list[Any]:
    if env is None:
        return []
    if isinstance(env, Mapping) and ("global" in env or "matrix" in env):
        entries: list[Any] = []
        for section in ("global", "matrix"):
            entries.extend(_config_env_entries(env.get(section)))
        return entries
    if isinstance(env, (list, tuple)):
        return list(env)
    return [env]


class BuildData:
    """Resolved build data: frozen config plus worker-level switches."""

    def __init__(self, config: Mapping[str, Any], payload: Payload | None = None):
        self.payload = payload or Payload()
        self.config = freeze(config)

    @property
    def language(self) -> str:
        return str(self.config.get("language") or "generic")

    @property
    def result(self) -> str | None:
        return self.config.get(".result")

    @property
    def paranoid_mode(self) -> bool:
        return self.payload.paranoid

    @property
    def skip_resolv_updates(self) -> bool:
        return self.payload.skip_resolv_updates

    @property
    def skip_etc_hosts_fix(self) -> bool:
        return self.payload.skip_etc_hosts_fix

    @property
    def hosts(self) -> Mapping[str, str]:
        return freeze(self.payload.hosts)

    @property
    def repository(self) -> Mapping[str, Any]:
        return freeze(self.payload.repository)

    @property
    def job(self) -> Mapping[str, Any]:
        return freeze(self.payload.job)

    @property
    def cache_options(self) -> Mapping[str, Any]:
        return freeze(self.payload.cache_options)

    def cache(self, kind: str) -> bool:
        """Whether the config enables the given cache kind (apt, directories)."""
        setting = self.config.get("cache")
        if isinstance(setting, str):
            return setting == kind
        if isinstance(setting, Mapping):
            return bool(setting.get(kind))
        if isinstance(setting, (list, tuple)):
            return kind in setting
        return False

    @property
    def cache_directories(self) -> Tuple[str, ...]:
        setting = self.config.get("cache")
        if isinstance(setting, Mapping):
            return tuple(str(d) for d in setting.get("directories") or ())
        return ()

    @property
    def env_vars_groups(self) -> Tuple[EnvVarGroup, ...]:
        settings_vars = tuple(
            EnvVar(key=var.name, value=var.value, secure=not var.public)
            for var in self.payload.env_vars
        )

        config_vars: list[EnvVar] = []
        for entry in _config_env_entries(self.config.get("env")):
            if isinstance(entry, Mapping):
                if "secure" in entry:
                    config_vars.extend(parse_env(entry["secure"], secure=True))
            else:
                config_vars.extend(parse_env(entry))

        return (
            EnvVarGroup(source=REPOSITORY_SETTINGS, vars=settings_vars),
            EnvVarGroup(source=CONFIG_FILE, vars=tuple(config_vars)),
        )
