"""cibuild.shell - shell AST, builder DSL and renderer."""

from cibuild.shell.ast import (
    Branch,
    Command,
    ConditionalBlock,
    Export,
    FoldBlock,
    Raw,
    Script,
)
from cibuild.shell.builder import ContextStack, ShellBuilder
from cibuild.shell.renderer import REDACTED, RETRY_ATTEMPTS, Renderer

__all__ = [
    "Branch",
    "Command",
    "ConditionalBlock",
    "ContextStack",
    "Export",
    "FoldBlock",
    "Raw",
    "REDACTED",
    "RETRY_ATTEMPTS",
    "Renderer",
    "Script",
    "ShellBuilder",
]
