from __future__ import annotations

from cibuild.script.base import Script
from cibuild.script.registry import register_profile
from cibuild.script.shared import Jdk


@register_profile("java", "pure_java", "jvm")
class PureJava(Script):
    """Plain JVM builds with gradle, maven or ant."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.jdk = Jdk(self.config)

    def export(self) -> None:
        super().export()
        self.jdk.export(self.sh)

    def setup(self) -> None:
        super().setup()
        self.jdk.setup(self.sh)

    def announce(self) -> None:
        super().announce()
        self.jdk.announce(self.sh)

    def install(self) -> None:
        sh = self.sh
        with sh.if_("[[ -f build.gradle ]]"):
            sh.cmd(
                "gradle assemble",
                echo=True,
                assert_=True,
                retry=True,
                timing=True,
                fold="install",
            )
            sh.elif_("[[ -f pom.xml ]]")
            sh.cmd(
                "mvn install -DskipTests=true -Dmaven.javadoc.skip=true -B -V",
                echo=True,
                assert_=True,
                retry=True,
                timing=True,
                fold="install",
            )

    def script(self) -> None:
        sh = self.sh
        with sh.if_("[[ -f build.gradle ]]"):
            self.script_cmd("gradle check")
            sh.elif_("[[ -f pom.xml ]]")
            self.script_cmd("mvn test -B")
            sh.else_()
            self.script_cmd("ant test")

    def cache_slug(self) -> str:
        return self.jdk.cache_slug(super().cache_slug())
