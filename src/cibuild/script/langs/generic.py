from __future__ import annotations

from cibuild.script.base import Script
from cibuild.script.registry import register_profile


@register_profile("generic", "bash", "sh", "shell")
class Generic(Script):
    """No toolchain; everything comes from the build spec."""

    def script(self) -> None:
        self.sh.echo("No script configured for this build.", ansi="yellow")
