"""Script - the stage-hook contract every profile implements.

One method per stage. The defaults here are the shared behaviour; a
profile overrides a hook and calls ``super().<hook>()`` before or after
its own additions. Hooks take no arguments: they read ``self.data`` and
write through ``self.sh``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from cibuild.config import deep_merge
from cibuild.data import BuildData
from cibuild.script.shared import Capabilities
from cibuild.script.shared import git as git_defaults
from cibuild.shell import ShellBuilder

log = logging.getLogger(__name__)

RESOLV_NAMESERVERS = ("199.91.168.70", "199.91.168.71")


def as_list(value: Any) -> list[str]:
    """Normalize a stage setting (string or list of strings) to a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class Script:
    """Default build script: no language toolchain, shared stages only."""

    name = "generic"
    DEFAULTS: dict[str, Any] = {}

    def __init__(
        self,
        data: BuildData,
        sh: ShellBuilder,
        capabilities: Capabilities | None = None,
    ):
        self.data = data
        self.sh = sh
        caps = capabilities or Capabilities()
        self.git = caps.git
        self.services = caps.services
        self.directory_cache = caps.directory_cache
        self.addons = caps.addons

    @classmethod
    def defaults(cls) -> dict[str, Any]:
        return deep_merge(git_defaults.DEFAULTS, cls.DEFAULTS)

    @property
    def config(self):
        return self.data.config

    def cache_slug(self) -> str:
        return "cache"

    # -- builtin stages ---------------------------------------------------

    def configure(self) -> None:
        if not self.data.skip_resolv_updates:
            self.fix_resolv_conf()
        if not self.data.skip_etc_hosts_fix:
            self.fix_etc_hosts()

    def checkout(self) -> None:
        self.git.checkout(self.sh, self.data)

    def pre_setup(self) -> None:
        self.services.start(self.sh, as_list(self.config.get("services")))
        if self.data.cache("apt"):
            self.setup_apt_cache()
        self.fix_ps4()
        self.run_addons("after_pre_setup")

    def paranoid_mode(self) -> None:
        if not self.data.paranoid_mode:
            return
        self.sh.newline()
        self.sh.echo(
            "Sudo, services, addons, setuid and setgid have been disabled.",
            ansi="green",
        )
        self.sh.newline()
        self.sh.cmd(
            "sudo -n sh -c \"sed -e 's/^%.*//' -i.bak /etc/sudoers && "
            "rm -f /etc/sudoers.d/cibuild && "
            'find / -perm -4000 -exec chmod a-s {} \\; 2>/dev/null"'
        )

    def export(self) -> None:
        sh = self.sh
        sh.export("CIBUILD", "true", echo=False)
        sh.export("CI", "true", echo=False)
        sh.export("CONTINUOUS_INTEGRATION", "true", echo=False)

        groups = self.data.env_vars_groups
        announce = any(group.announce for group in groups)
        if announce:
            sh.newline()

        for group in groups:
            if group.announce:
                sh.echo(f"Setting environment variables from {group.source}", ansi="green")
            for var in group.vars:
                sh.export(var.key, var.value, echo=var.echo, secure=var.secure)

        if announce:
            sh.newline()

    def setup(self) -> None:
        if self.data.cache("directories"):
            self.directory_cache.fetch(
                self.sh, self.cache_slug(), self.data.cache_directories
            )

    def announce(self) -> None:
        pass

    # -- custom stages ----------------------------------------------------

    def before_install(self) -> None:
        pass

    def install(self) -> None:
        pass

    def before_script(self) -> None:
        pass

    def script(self) -> None:
        pass

    def after_result(self) -> None:
        success = as_list(self.config.get("after_success"))
        failure = as_list(self.config.get("after_failure"))
        if not success and not failure:
            return

        sh = self.sh
        if success:
            with sh.if_("[[ $CIBUILD_TEST_RESULT = 0 ]]"):
                self._after_commands(success)
                if failure:
                    sh.else_()
                    self._after_commands(failure)
        else:
            with sh.if_("[[ $CIBUILD_TEST_RESULT != 0 ]]"):
                self._after_commands(failure)

    def after_script(self) -> None:
        pass

    # -- post-pipeline ----------------------------------------------------

    def finish(self, sh: ShellBuilder) -> None:
        """Commands run on exit, even after an asserted failure."""
        if self.data.cache("directories"):
            self.directory_cache.push(sh, self.cache_slug(), self.data.cache_directories)

    # -- helpers ----------------------------------------------------------

    def run_addons(self, hook: str) -> None:
        self.addons.run(self.sh, hook, self.data)

    def script_cmd(self, text: str, assert_: bool = False) -> None:
        """Run a test command; unless asserted, record its result."""
        self.sh.cmd(text, echo=True, assert_=assert_, timing=True)
        if not assert_:
            self.sh.raw("cibuild_result $?")

    def _after_commands(self, commands: Iterable[str]) -> None:
        for command in commands:
            self.sh.cmd(command, echo=True, timing=True)

    def setup_apt_cache(self) -> None:
        apt_cache = self.data.hosts.get("apt_cache")
        if not apt_cache:
            return
        self.sh.echo("Setting up APT cache", ansi="green")
        self.sh.cmd(
            f"echo 'Acquire::http {{ Proxy \"{apt_cache}\"; }};' | "
            "sudo tee /etc/apt/apt.conf.d/01proxy &> /dev/null"
        )

    def fix_resolv_conf(self) -> None:
        first = RESOLV_NAMESERVERS[0].rsplit(".", 1)[0]
        servers = "\\n".join(f"nameserver {ip}" for ip in RESOLV_NAMESERVERS)
        self.sh.cmd(
            f"grep '{first}' /etc/resolv.conf > /dev/null || "
            f"echo -e '{servers}' | sudo tee /etc/resolv.conf &> /dev/null"
        )

    def fix_etc_hosts(self) -> None:
        self.sh.cmd(
            "sudo sed -e 's/^\\(127\\.0\\.0\\.1.*\\)$/\\1 '`hostname`'/' -i'.bak' /etc/hosts"
        )

    def fix_ps4(self) -> None:
        self.sh.export("PS4", '"+ "', echo=False)
