"""Capabilities shared across profiles.

Profiles hold these by reference and call them from their own hooks;
none of them is a base class.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cibuild.config import Payload
from cibuild.script.shared.addons import AddonRunner, DefaultAddonRunner
from cibuild.script.shared.directory_cache import (
    DefaultDirectoryCacheManager,
    DirectoryCacheManager,
)
from cibuild.script.shared.git import DefaultGitCheckout, GitCheckout
from cibuild.script.shared.jdk import Jdk
from cibuild.script.shared.services import DefaultServiceManager, ServiceManager


@dataclass
class Capabilities:
    """The external collaborators one compile works with."""

    git: GitCheckout = field(default_factory=DefaultGitCheckout)
    services: ServiceManager = field(default_factory=DefaultServiceManager)
    directory_cache: DirectoryCacheManager = field(
        default_factory=DefaultDirectoryCacheManager
    )
    addons: AddonRunner = field(default_factory=DefaultAddonRunner)

    @classmethod
    def for_payload(cls, payload: Payload) -> "Capabilities":
        return cls(
            directory_cache=DefaultDirectoryCacheManager(payload.cache_options),
        )


__all__ = [
    "AddonRunner",
    "Capabilities",
    "DirectoryCacheManager",
    "GitCheckout",
    "Jdk",
    "ServiceManager",
]
