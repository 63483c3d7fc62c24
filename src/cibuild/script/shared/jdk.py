"""JDK selection shared by JVM-based profiles."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from cibuild.shell import ShellBuilder


class Jdk:
    """Switches, announces and cache-partitions by the configured JDK."""

    def __init__(self, config: Mapping[str, Any]):
        self.config = config

    @property
    def version(self) -> Optional[str]:
        jdk = self.config.get("jdk")
        return str(jdk) if jdk else None

    def export(self, sh: ShellBuilder) -> None:
        if self.version:
            sh.export("CIBUILD_JDK_VERSION", self.version, echo=False)

    def setup(self, sh: ShellBuilder) -> None:
        if self.version:
            sh.cmd(f"jdk_switcher use {self.version}", echo=True, assert_=True)

    def announce(self, sh: ShellBuilder) -> None:
        sh.cmd("java -version", echo=True)
        sh.cmd("javac -version", echo=True)

    def cache_slug(self, slug: str) -> str:
        if self.version:
            return f"{slug}--jdk-{self.version}"
        return slug
