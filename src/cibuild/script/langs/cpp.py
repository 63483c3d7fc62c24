from __future__ import annotations

from cibuild.script.base import Script
from cibuild.script.registry import register_profile

# compiler setting -> (CXX, CC)
COMPILERS = {
    "gcc": ("g++", "gcc"),
    "g++": ("g++", "gcc"),
    "clang": ("clang++", "clang"),
    "clang++": ("clang++", "clang"),
}


@register_profile("cpp", "c++")
class Cpp(Script):
    DEFAULTS = {"compiler": "g++"}

    @property
    def compiler(self) -> str:
        return str(self.config["compiler"])

    @property
    def cxx(self) -> str:
        return COMPILERS.get(self.compiler, (self.compiler, self.compiler))[0]

    @property
    def cc(self) -> str:
        return COMPILERS.get(self.compiler, (self.compiler, self.compiler))[1]

    def export(self) -> None:
        super().export()
        self.sh.export("CXX", self.cxx)
        self.sh.export("CC", self.cc)

    def announce(self) -> None:
        super().announce()
        self.sh.cmd(f"{self.cxx} --version", echo=True)

    def script(self) -> None:
        self.script_cmd("./configure && make && make test", assert_=True)

    def cache_slug(self) -> str:
        return f"{super().cache_slug()}--compiler-{self.compiler}"
