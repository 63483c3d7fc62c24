from __future__ import annotations

from cibuild.script.base import Script
from cibuild.script.registry import register_profile
from cibuild.script.shared import Jdk


@register_profile("android")
class Android(Script):
    """Android SDK builds: gradle wrapper, gradle, maven or ant."""

    DEFAULTS = {
        "android": {
            "components": [],
            "licenses": [],
        }
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.jdk = Jdk(self.config)

    @property
    def components(self) -> list[str]:
        return list(self.config["android"]["components"])

    @property
    def licenses(self) -> list[str]:
        return list(self.config["android"]["licenses"])

    def export(self) -> None:
        super().export()
        self.jdk.export(self.sh)

    def setup(self) -> None:
        super().setup()
        self.jdk.setup(self.sh)
        if self.components:
            self.install_sdk_components(self.components)

    def announce(self) -> None:
        super().announce()
        self.jdk.announce(self.sh)

    def script(self) -> None:
        sh = self.sh
        with sh.if_("[[ -f gradlew ]]"):
            self.script_cmd("./gradlew build connectedCheck")
            sh.elif_("[[ -f build.gradle ]]")
            self.script_cmd("gradle build connectedCheck")
            sh.elif_("[[ -f pom.xml ]]")
            self.script_cmd("mvn install -B")
            sh.else_()
            # "installt" is passed through verbatim; worker tooling matches on it.
            self.script_cmd("ant debug installt test")

    def cache_slug(self) -> str:
        return self.jdk.cache_slug(super().cache_slug())

    def install_sdk_components(self, components: list[str]) -> None:
        with self.sh.fold("android.install"):
            self.sh.echo("Installing Android dependencies")
            for name in components:
                self.sh.cmd(self.install_sdk_component(name), echo=True, assert_=True)

    def install_sdk_component(self, name: str) -> str:
        code = f"android-update-sdk --components={name}"
        if self.licenses:
            code += f" --accept-licenses='{'|'.join(self.licenses)}'"
        return code
