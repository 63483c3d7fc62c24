"""Directory cache: fetch before the build, push from the finish hook.

Archives are namespaced by the profile's cache slug so that toolchains
which cannot share artifacts never see each other's caches.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from cibuild.shell import ShellBuilder

CACHE_TOOL = "cibuild-cache"


class DirectoryCacheManager(ABC):
    """Appends cache pull/push commands."""

    @abstractmethod
    def fetch(self, sh: ShellBuilder, slug: str, directories: Sequence[str]) -> None:
        pass

    @abstractmethod
    def push(self, sh: ShellBuilder, slug: str, directories: Sequence[str]) -> None:
        pass


class DefaultDirectoryCacheManager(DirectoryCacheManager):
    """Drives the ``cibuild-cache`` helper installed on workers.

    ``options`` may carry a ``url`` (often signed); it is marked secure so
    it never shows up in the build log.
    """

    def __init__(self, options: Mapping[str, Any] | None = None):
        self.options = dict(options or {})

    def fetch(self, sh: ShellBuilder, slug: str, directories: Sequence[str]) -> None:
        if not directories:
            return
        with sh.fold("cache.fetch"):
            sh.echo("Setting up build cache", ansi="green")
            sh.cmd(
                self._command("fetch", slug, directories),
                echo=True,
                timing=True,
                secure=self._secure,
            )

    def push(self, sh: ShellBuilder, slug: str, directories: Sequence[str]) -> None:
        if not directories:
            return
        with sh.fold("cache.push"):
            sh.cmd(
                self._command("push", slug, directories),
                echo=True,
                timing=True,
                secure=self._secure,
            )

    @property
    def _secure(self) -> bool:
        return bool(self.options.get("url"))

    def _command(self, action: str, slug: str, directories: Sequence[str]) -> str:
        parts = [CACHE_TOOL, action, f"--slug={shlex.quote(slug)}"]
        if self.options.get("url"):
            parts.append(f"--url={shlex.quote(str(self.options['url']))}")
        # Directories are shell text so that $HOME and friends expand.
        parts.extend(str(d) for d in directories)
        return " ".join(parts)
