"""Background services a build asks for (databases, queues, ...)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from cibuild.shell import ShellBuilder

# Names users write that differ from the init script name.
SERVICE_ALIASES = {
    "hbase": "hbase-master",
    "memcache": "memcached",
    "mongodb": "mongod",
    "rabbitmq": "rabbitmq-server",
    "redis": "redis-server",
}


class ServiceManager(ABC):
    """Appends startup commands for named services."""

    @abstractmethod
    def start(self, sh: ShellBuilder, services: Iterable[str]) -> None:
        pass


class DefaultServiceManager(ServiceManager):
    def start(self, sh: ShellBuilder, services: Iterable[str]) -> None:
        names = [SERVICE_ALIASES.get(str(name).lower(), str(name).lower()) for name in services]
        if not names:
            return
        with sh.fold("services"):
            for name in names:
                sh.cmd(f"sudo service {name} start", echo=True, timing=False)
            sh.raw("sleep 3")
