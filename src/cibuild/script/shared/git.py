"""Git checkout of the repository under test."""

from __future__ import annotations

import logging
import shlex
from abc import ABC, abstractmethod

from cibuild.data import BuildData
from cibuild.shell import ShellBuilder

log = logging.getLogger(__name__)

DEFAULTS = {
    "git": {
        "depth": 50,
        "submodules": True,
        "strategy": "clone",
    }
}


class GitCheckout(ABC):
    """Appends checkout commands for the resolved repository/ref."""

    @abstractmethod
    def checkout(self, sh: ShellBuilder, data: BuildData) -> None:
        pass


class DefaultGitCheckout(GitCheckout):
    """Shallow clone, optional PR ref fetch, detached checkout, submodules."""

    def checkout(self, sh: ShellBuilder, data: BuildData) -> None:
        repository = data.repository
        slug = repository.get("slug")
        if not slug:
            log.debug("No repository in payload, skipping checkout")
            return

        git = data.config.get("git") or {}
        strategy = git.get("strategy", "clone")
        if strategy != "clone":
            log.warning("Unsupported git strategy %r, falling back to clone", strategy)

        job = data.job
        source_url = repository.get("source_url") or f"https://github.com/{slug}.git"
        branch = job.get("branch")

        clone = f"git clone --depth={git.get('depth', 50)}"
        if branch:
            clone += f" --branch={shlex.quote(str(branch))}"
        clone += f" {source_url} {slug}"

        sh.cmd(clone, echo=True, assert_=True, retry=True, fold="git.checkout")
        sh.cmd(f"cd {slug}", echo=True)

        ref = job.get("ref")
        if ref:
            sh.cmd(
                f"git fetch origin +{ref}:",
                echo=True,
                assert_=True,
                retry=True,
                fold="git.fetch",
            )

        commit = job.get("commit")
        if commit:
            sh.cmd(f"git checkout -qf {commit}", echo=True, assert_=True)

        if git.get("submodules", True):
            with sh.if_("[[ -f .gitmodules ]]"):
                with sh.fold("git.submodule"):
                    sh.cmd("git submodule init", echo=True)
                    sh.cmd("git submodule update", echo=True, assert_=True, retry=True)
