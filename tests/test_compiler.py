"""End-to-end tests for the script compiler."""

import logging
import shlex

import pytest

import cibuild.compiler
from cibuild import (
    ConfigStatus,
    PayloadResolver,
    ScriptCompiler,
    StructuralFault,
    UnknownLanguageError,
    compile_script,
)
from cibuild.script import Script
from cibuild.shell.ast import (
    REDACTED,
    Branch,
    Command,
    ConditionalBlock,
    FoldBlock,
    Script as ScriptNode,
    dumps,
    redact,
)
from cibuild.templates import TemplateRenderer


def slug_of(config):
    return ScriptCompiler(PayloadResolver(config)).build().cache_slug


def assert_in_order(text, *needles):
    pos = -1
    for needle in needles:
        found = text.find(needle, pos + 1)
        assert found > pos, f"{needle!r} missing or out of order"
        pos = found


def test_c_profile_defaults():
    """C: CC export, compiler version, then the asserted build."""
    text = compile_script({"language": "c"})
    assert_in_order(
        text,
        "echo '$ export CC=gcc'\nexport CC=gcc",
        "echo '$ gcc --version'\ngcc --version",
        "cibuild_time_start\n"
        "echo '$ ./configure && make && make test'\n"
        "./configure && make && make test\n"
        "cibuild_time_finish\n"
        "cibuild_assert",
    )


def test_haskell_profile_with_ghc():
    text = compile_script({"language": "haskell", "ghc": "7.8"})
    assert "export PATH=/usr/local/ghc/$(ghc_find 7.8)/bin/:$PATH" in text
    assert (
        "cibuild_fold start cabal\n"
        "  cibuild_time_start\n"
        "  echo '$ cabal update'\n"
        "  cibuild_retry eval 'cabal update'\n"
        "  cibuild_time_finish\n"
        "  cibuild_assert\n"
        "cibuild_fold end cabal"
    ) in text


def test_config_not_found_still_builds():
    text = compile_script({"config": {"language": "c", ".result": "not_found"}})
    assert "Could not find .cibuild.yml, using standard configuration." in text
    assert_in_order(text, "Could not find", "export CC=gcc", "./configure && make")


def test_server_error_stops_build_content():
    text = compile_script({"config": {"language": "c", ".result": "server_error"}})
    assert_in_order(text, "Could not fetch .cibuild.yml.", "cibuild_terminate 2")
    for content in ("export CIBUILD=true", "export CC=gcc", "./configure"):
        assert content not in text


def test_server_error_has_no_finish_hook():
    compiled = ScriptCompiler(
        PayloadResolver(
            {"config": {".result": "server_error", "cache": {"directories": ["x"]}}}
        )
    ).build()
    assert compiled.status is ConfigStatus.SERVER_ERROR
    assert compiled.finish is None


def test_compile_is_deterministic():
    payload = {
        "config": {
            "language": "android",
            "jdk": "oraclejdk8",
            "env": ["A=1 B='two words'", {"secure": "TOKEN=abc"}],
            "android": {"components": ["build-tools-19"]},
            "cache": {"directories": ["$HOME/.gradle"]},
            "services": ["redis"],
        },
        "env_vars": [{"name": "KEY", "value": "v"}],
        "repository": {"slug": "octo/app"},
        "job": {"branch": "main", "commit": "abc123"},
    }
    assert compile_script(payload) == compile_script(payload)


def test_header_and_footer_wrap_body():
    text = compile_script({"language": "generic"})
    assert text.startswith("#!/bin/bash\n")
    assert text.endswith("cibuild_terminate ${CIBUILD_TEST_RESULT:-0}")
    assert_in_order(text, "trap cibuild_finish EXIT", "export CIBUILD=true", "Done.")


def test_retry_bound_in_header():
    text = compile_script({})
    assert "while [ $count -le 3 ]; do" in text


class LabelTemplates(TemplateRenderer):
    def render(self, name, **context):
        return f"# {name}"


def test_custom_template_renderer():
    compiler = ScriptCompiler(
        PayloadResolver({"config": {".result": "server_error"}}),
        templates=LabelTemplates(),
    )
    assert compiler.compile().split("\n") == [
        "# header.sh",
        r"""printf "${ANSI_RED}%s${ANSI_RESET}\n" 'Could not fetch .cibuild.yml.'""",
        "cibuild_terminate 2",
        "# footer.sh",
    ]


@pytest.mark.parametrize(
    "config,slug",
    [
        ({"language": "generic"}, "cache"),
        ({"language": "c"}, "cache--compiler-gcc"),
        ({"language": "c", "compiler": "clang"}, "cache--compiler-clang"),
        ({"language": "cpp", "compiler": "clang"}, "cache--compiler-clang"),
        ({"language": "haskell"}, "cache"),
        ({"language": "haskell", "ghc": "7.8"}, "cache--ghc-7.8"),
        ({"language": "java", "jdk": "openjdk8"}, "cache--jdk-openjdk8"),
        ({"language": "android", "jdk": "oraclejdk8"}, "cache--jdk-oraclejdk8"),
    ],
)
def test_cache_slug(config, slug):
    assert slug_of(config) == slug


def test_cache_slug_ignores_unrelated_settings():
    a = slug_of({"language": "c", "script": "make"})
    b = slug_of({"language": "c", "env": ["X=1"], "services": ["redis"]})
    assert a == b
    assert a != slug_of({"language": "c", "compiler": "clang"})


def test_unknown_language():
    with pytest.raises(UnknownLanguageError) as exc:
        compile_script({"language": "cobol"})
    assert exc.value.exit_code == 2
    assert "cobol" in exc.value.message


class LeakyScript(Script):
    def script(self):
        self.sh.open_conditional("true")


def test_structural_fault_yields_no_text(monkeypatch):
    monkeypatch.setattr(cibuild.compiler, "get_profile", lambda language: LeakyScript)
    with pytest.raises(StructuralFault):
        compile_script({})


def test_log_ast_option(caplog):
    caplog.set_level(logging.DEBUG, logger="cibuild")
    compile_script({"language": "c"}, {"log_ast": True})
    assert "Script AST" in caplog.text
    assert "\"type\": \"Export\"" in caplog.text


def test_log_ast_redacts_secure_values(caplog):
    caplog.set_level(logging.DEBUG, logger="cibuild")
    compile_script(
        {
            "config": {"env": [{"secure": "TOKEN=s3cr3t"}]},
            "env_vars": [{"name": "PW", "value": "hunter2"}],
        },
        {"log_ast": True},
    )
    assert "Script AST" in caplog.text
    assert "s3cr3t" not in caplog.text
    assert "hunter2" not in caplog.text
    assert "\"value\": \"[secure]\"" in caplog.text


def test_redact_reaches_nested_nodes():
    secret = Command(text="deploy --token=s3cr3t", secure=True)
    plain = Command(text="make")
    tree = ScriptNode(
        children=(
            FoldBlock(label="deploy", children=(secret,)),
            ConditionalBlock(branches=(Branch(test="true", children=(secret, plain)),)),
        )
    )
    redacted = redact(tree)
    fold, conditional = redacted.children
    assert fold.children[0].text == REDACTED
    assert conditional.branches[0].children == (
        Command(text=REDACTED, secure=True),
        plain,
    )
    assert tree.children[0].children[0].text == "deploy --token=s3cr3t"
    assert "s3cr3t" not in dumps(tree)


def test_multiline_install_command_is_preserved():
    command = "python3 -c 'import sys\nprint(\"ok\")'"
    text = compile_script({"install": command})
    assert (
        "cibuild_fold start install\n"
        "  cibuild_time_start\n"
        f"  echo {shlex.quote('$ ' + command)}\n"
        f"  {command}\n"
        "  cibuild_time_finish\n"
        "  cibuild_assert\n"
        "cibuild_fold end install"
    ) in text
