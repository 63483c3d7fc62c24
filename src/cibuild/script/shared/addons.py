"""Addon system for cibuild.

Addons are configured under ``addons:`` in the build spec, keyed by name.
Each addon implements only the hooks it cares about; the runner calls a
hook on every configured addon that defines it.

Built-in addons:
- hosts: map extra hostnames to 127.0.0.1 (hook: after_pre_setup)
- apt_packages: install APT packages (hook: before_install)
"""

from __future__ import annotations

import logging
import shlex
from abc import ABC, abstractmethod
from typing import Any

from cibuild.data import BuildData
from cibuild.shell import ShellBuilder

log = logging.getLogger(__name__)


class Addon(ABC):
    """Base class for addons."""

    def __init__(self, config: Any):
        self.config = config

    @property
    @abstractmethod
    def name(self) -> str:
        """Addon name as written in the build spec (e.g. 'hosts')."""
        ...

    def _as_list(self) -> list[str]:
        if isinstance(self.config, str):
            return [self.config]
        return [str(item) for item in self.config or ()]


class HostsAddon(Addon):
    """hosts - Resolve extra hostnames to the loopback address."""

    @property
    def name(self) -> str:
        return "hosts"

    def after_pre_setup(self, sh: ShellBuilder) -> None:
        names = " ".join(self._as_list())
        if not names:
            return
        sh.cmd(
            f"echo {shlex.quote(f'127.0.0.1 {names}')} | sudo tee -a /etc/hosts > /dev/null",
            echo=True,
        )


class AptPackagesAddon(Addon):
    """apt_packages - Install packages before the install stage."""

    @property
    def name(self) -> str:
        return "apt_packages"

    def before_install(self, sh: ShellBuilder) -> None:
        packages = " ".join(shlex.quote(p) for p in self._as_list())
        if not packages:
            return
        with sh.fold("apt"):
            sh.echo("Installing APT Packages", ansi="yellow")
            sh.cmd(
                "sudo -E apt-get -yq --no-install-suggests --no-install-recommends "
                f"install {packages}",
                echo=True,
                assert_=True,
                retry=True,
                timing=True,
            )


# Addon registry
_BUILTIN_ADDONS: dict[str, type[Addon]] = {
    "hosts": HostsAddon,
    "apt_packages": AptPackagesAddon,
}


def get_addon(name: str) -> type[Addon]:
    if name in _BUILTIN_ADDONS:
        return _BUILTIN_ADDONS[name]
    raise ValueError(f"Unknown addon: {name}")


def list_builtin_addons() -> list[str]:
    return list(_BUILTIN_ADDONS.keys())


class AddonRunner(ABC):
    """Runs the addons registered for a hook."""

    @abstractmethod
    def run(self, sh: ShellBuilder, hook: str, data: BuildData) -> None:
        pass


class DefaultAddonRunner(AddonRunner):
    """Runs built-in addons configured in ``addons:``, in config order.

    Addons are skipped entirely in paranoid mode.
    """

    def run(self, sh: ShellBuilder, hook: str, data: BuildData) -> None:
        if data.paranoid_mode:
            return

        for name, config in (data.config.get("addons") or {}).items():
            try:
                addon_cls = get_addon(name)
            except ValueError:
                log.warning("Skipping unknown addon %r", name)
                continue

            method = getattr(addon_cls(config), hook, None)
            if method is not None:
                log.debug("Running addon %s for %s", name, hook)
                method(sh)
