"""Script compiler - turns a resolved payload into one bash script.

Flow:
1. Resolve the payload and its status (ConfigResolver)
2. Select the profile for the configured language (registry)
3. Merge profile defaults under the user config and freeze it
4. Run the stage pipeline against a fresh builder
5. Build the finish hook into its own tree
6. Render both trees and wrap them in header/footer boilerplate
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from cibuild._version import __version__
from cibuild.config import CompileOptions, Payload, deep_merge
from cibuild.data import BuildData
from cibuild.resolver import ConfigResolver, ConfigStatus, PayloadResolver
from cibuild.script import Pipeline, Script, get_profile
from cibuild.script.shared import Capabilities
from cibuild.shell import RETRY_ATTEMPTS, Renderer, ShellBuilder
from cibuild.shell.ast import Script as ScriptNode, dumps
from cibuild.templates import JinjaTemplateRenderer, TemplateRenderer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledScript:
    """The finished trees of one compile, before rendering."""

    profile: Script
    status: ConfigStatus
    body: ScriptNode
    finish: ScriptNode | None

    @property
    def cache_slug(self) -> str:
        return self.profile.cache_slug()


class ScriptCompiler:
    """Compiles one build job into a bash script.

    Usage:
        compiler = ScriptCompiler(PayloadResolver({"config": {"language": "c"}}))
        text = compiler.compile()
    """

    def __init__(
        self,
        resolver: ConfigResolver,
        options: CompileOptions | Mapping[str, Any] | None = None,
        *,
        capabilities: Capabilities | None = None,
        templates: TemplateRenderer | None = None,
        renderer: Renderer | None = None,
    ):
        self.resolver = resolver
        if isinstance(options, CompileOptions):
            self.options = options
        else:
            self.options = CompileOptions(**(options or {}))
        self.capabilities = capabilities
        self.templates = templates or JinjaTemplateRenderer(self.options.templates_dir)
        self.renderer = renderer or Renderer()

    def build(self) -> CompiledScript:
        """Run the pipeline and return the finished trees."""
        resolution = self.resolver.resolve()
        payload = resolution.payload

        profile_cls = get_profile(payload.config.get("language"))
        log.info("Compiling %s build (config %s)", profile_cls.name, resolution.status.value)

        data = BuildData(deep_merge(profile_cls.defaults(), payload.config), payload)
        capabilities = self.capabilities or Capabilities.for_payload(payload)

        profile = profile_cls(data, ShellBuilder(), capabilities)
        completed = Pipeline(profile, resolution.status).run()
        body = profile.sh.finish()

        finish = None
        if completed:
            finish_sh = ShellBuilder()
            profile.finish(finish_sh)
            finish = finish_sh.finish()

        return CompiledScript(
            profile=profile, status=resolution.status, body=body, finish=finish
        )

    def compile(self) -> str:
        """Compile to the final script text: header, body, footer."""
        compiled = self.build()
        body = self.renderer.render(compiled.body)
        finish = self.renderer.render(compiled.finish, depth=1) if compiled.finish else ""

        if self.options.log_ast:
            log.debug("Script AST:\n%s", dumps(compiled.body))

        header = self.templates.render(
            "header.sh",
            finish=finish,
            retry_attempts=RETRY_ATTEMPTS,
            version=__version__,
        )
        footer = self.templates.render("footer.sh")
        return "\n".join([header, body, footer])


def compile_script(
    payload: Payload | Mapping[str, Any],
    options: CompileOptions | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> str:
    """Compile an in-memory payload (or bare build spec) to script text."""
    return ScriptCompiler(PayloadResolver(payload), options, **kwargs).compile()
