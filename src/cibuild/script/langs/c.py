from __future__ import annotations

from cibuild.script.base import Script
from cibuild.script.registry import register_profile


@register_profile("c")
class C(Script):
    DEFAULTS = {"compiler": "gcc"}

    @property
    def compiler(self) -> str:
        return str(self.config["compiler"])

    def export(self) -> None:
        super().export()
        self.sh.export("CC", self.compiler)

    def announce(self) -> None:
        super().announce()
        self.sh.cmd(f"{self.compiler} --version", echo=True)

    def script(self) -> None:
        self.script_cmd("./configure && make && make test", assert_=True)

    def cache_slug(self) -> str:
        return f"{super().cache_slug()}--compiler-{self.compiler}"
