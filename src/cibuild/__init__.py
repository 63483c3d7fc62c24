"""cibuild - compiles CI build specifications into portable bash scripts.

The core is a small shell compiler:
- shell.ast: immutable nodes describing shell intent
- shell.builder: nesting-aware DSL writing those nodes
- shell.renderer: deterministic AST -> bash text
- script: stage pipeline and per-language profiles driving the DSL
"""

from cibuild._version import __version__
from cibuild.compiler import CompiledScript, ScriptCompiler, compile_script
from cibuild.config import CompileOptions, Payload
from cibuild.errors import (
    CibuildError,
    ConfigurationFault,
    StructuralFault,
    UnknownLanguageError,
)
from cibuild.resolver import (
    ConfigResolver,
    ConfigStatus,
    PayloadResolver,
    Resolution,
    YamlFileResolver,
)
from cibuild.shell import Renderer, ShellBuilder

__all__ = [
    "__version__",
    "CibuildError",
    "CompileOptions",
    "CompiledScript",
    "ConfigResolver",
    "ConfigStatus",
    "ConfigurationFault",
    "Payload",
    "PayloadResolver",
    "Renderer",
    "Resolution",
    "ScriptCompiler",
    "ShellBuilder",
    "StructuralFault",
    "UnknownLanguageError",
    "YamlFileResolver",
    "compile_script",
]
