from __future__ import annotations

from typing import Optional

from cibuild.script.base import Script
from cibuild.script.registry import register_profile


@register_profile("haskell")
class Haskell(Script):
    """GHC + cabal builds. ``ghc`` selects a preinstalled GHC version."""

    @property
    def ghc(self) -> Optional[str]:
        ghc = self.config.get("ghc")
        return str(ghc) if ghc else None

    def setup(self) -> None:
        super().setup()
        if self.ghc:
            self.sh.export("PATH", f"/usr/local/ghc/$(ghc_find {self.ghc})/bin/:$PATH")

    def announce(self) -> None:
        super().announce()
        self.sh.cmd("ghc --version", echo=True)
        self.sh.cmd("cabal --version", echo=True)

    def install(self) -> None:
        self.sh.cmd(
            "cabal update", echo=True, assert_=True, retry=True, timing=True, fold="cabal"
        )
        self.sh.cmd(
            "cabal install --only-dependencies --enable-tests",
            echo=True,
            assert_=True,
            retry=True,
            timing=True,
            fold="install",
        )

    def script(self) -> None:
        self.script_cmd("cabal configure --enable-tests && cabal build && cabal test")

    def cache_slug(self) -> str:
        slug = super().cache_slug()
        if self.ghc:
            slug += f"--ghc-{self.ghc}"
        return slug
