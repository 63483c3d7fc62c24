"""Stage pipeline - drives a profile through the fixed build phases.

Builtin stages always run the profile hook. Custom stages run the
commands from the build spec when it defines any for that stage, and
the profile hook otherwise. Stages run exactly once each, in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Literal

from cibuild.resolver import ConfigStatus
from cibuild.script.base import Script, as_list

log = logging.getLogger(__name__)

STAGES = {
    "builtin": (
        "configure",
        "checkout",
        "pre_setup",
        "paranoid_mode",
        "export",
        "setup",
        "announce",
    ),
    "custom": (
        "before_install",
        "install",
        "before_script",
        "script",
        "after_result",
        "after_script",
    ),
}

# User commands in these stages abort the build when they fail.
ASSERTED_STAGES = ("before_install", "install", "before_script")

CONFIG_FILE = ".cibuild.yml"


@dataclass(frozen=True)
class Stage:
    name: str
    kind: Literal["builtin", "custom"]


def stages() -> Iterator[Stage]:
    """All stages in execution order: builtin first, then custom."""
    for kind in ("builtin", "custom"):
        for name in STAGES[kind]:
            yield Stage(name=name, kind=kind)


class Pipeline:
    """Runs every stage of ``script`` against its builder."""

    def __init__(self, script: Script, status: ConfigStatus = ConfigStatus.OK):
        self.script = script
        self.status = status

    @property
    def sh(self):
        return self.script.sh

    def run(self) -> bool:
        """Run all stages. Returns False if configuration stopped the build."""
        if not self.check_config():
            return False
        for stage in stages():
            self.run_stage(stage)
        return True

    def check_config(self) -> bool:
        if self.status is ConfigStatus.NOT_FOUND:
            log.warning("%s not found, using standard configuration", CONFIG_FILE)
            self.sh.echo(
                f"Could not find {CONFIG_FILE}, using standard configuration.",
                ansi="red",
            )
            return True
        if self.status is ConfigStatus.SERVER_ERROR:
            log.error("Could not fetch %s, terminating build", CONFIG_FILE)
            self.sh.echo(f"Could not fetch {CONFIG_FILE}.", ansi="red")
            self.sh.cmd("cibuild_terminate 2")
            return False
        return True

    def run_stage(self, stage: Stage) -> None:
        log.debug("Running %s stage %s", stage.kind, stage.name)
        if stage.kind == "builtin":
            getattr(self.script, stage.name)()
        else:
            self.run_custom_stage(stage.name)

    def run_custom_stage(self, name: str) -> None:
        script = self.script
        script.run_addons(f"before_{name}")

        commands = as_list(script.config.get(name))
        if commands and name != "after_result":
            self.run_user_commands(name, commands)
        else:
            getattr(script, name)()

        script.run_addons(f"after_{name}")

    def run_user_commands(self, name: str, commands: list[str]) -> None:
        sh = self.sh
        for i, command in enumerate(commands, start=1):
            fold = name if len(commands) == 1 else f"{name}.{i}"
            if name == "script":
                self.script.script_cmd(command)
            elif name in ASSERTED_STAGES:
                sh.cmd(command, echo=True, assert_=True, timing=True, fold=fold)
            else:
                sh.cmd(command, echo=True, timing=True, fold=fold)
