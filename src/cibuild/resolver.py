"""Configuration resolvers.

A resolver hands the compiler a payload plus a status telling whether the
user's build spec could be fetched. The compiler itself never does I/O.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from cibuild.config import Payload, payload_from_dict
from cibuild.errors import ConfigurationFault

log = logging.getLogger(__name__)

RESULT_KEY = ".result"


class ConfigStatus(str, Enum):
    OK = "configured"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class Resolution:
    payload: Payload
    status: ConfigStatus = ConfigStatus.OK


class ConfigResolver(ABC):
    """Supplies the payload for one compile."""

    @abstractmethod
    def resolve(self) -> Resolution:
        pass


def status_of(config: Mapping[str, Any]) -> ConfigStatus:
    """Read the fetch status an upstream fetcher left in the config."""
    value = config.get(RESULT_KEY)
    if value is None:
        return ConfigStatus.OK
    try:
        return ConfigStatus(value)
    except ValueError:
        log.warning("Ignoring unknown config result %r", value)
        return ConfigStatus.OK


class PayloadResolver(ConfigResolver):
    """Resolves an in-memory payload (a Payload or a plain mapping)."""

    def __init__(self, payload: Payload | Mapping[str, Any]):
        if isinstance(payload, Payload):
            self.payload = payload
        else:
            self.payload = _validate(payload)

    def resolve(self) -> Resolution:
        return Resolution(self.payload, status_of(self.payload.config))


class YamlFileResolver(ConfigResolver):
    """Resolves a payload from a YAML file; a missing file is ``not_found``."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def resolve(self) -> Resolution:
        if not self.path.exists():
            log.warning("Build config %s not found, using defaults", self.path)
            return Resolution(Payload(), ConfigStatus.NOT_FOUND)

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationFault(f"Invalid YAML in {self.path}: {e}") from e

        payload = _validate(data)
        return Resolution(payload, status_of(payload.config))


def _validate(data: Any) -> Payload:
    try:
        return payload_from_dict(data)
    except (TypeError, ValidationError) as e:
        raise ConfigurationFault(f"Invalid payload: {e}") from e
