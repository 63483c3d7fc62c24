"""Tests for payload models, build data and configuration resolvers."""

import pytest

from cibuild.config import Payload, deep_merge, freeze, payload_from_dict
from cibuild.data import (
    CONFIG_FILE,
    REPOSITORY_SETTINGS,
    BuildData,
    EnvVar,
    parse_env,
)
from cibuild.errors import ConfigurationFault
from cibuild.resolver import (
    ConfigStatus,
    PayloadResolver,
    YamlFileResolver,
    status_of,
)


def test_deep_merge_nested():
    base = {"git": {"depth": 50, "submodules": True}, "compiler": "gcc"}
    override = {"git": {"depth": 1}, "script": ["make"]}
    merged = deep_merge(base, override)
    assert merged == {
        "git": {"depth": 1, "submodules": True},
        "compiler": "gcc",
        "script": ["make"],
    }
    assert base["git"]["depth"] == 50


def test_deep_merge_replaces_lists():
    assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}


def test_deep_merge_scalar_over_mapping():
    assert deep_merge({"cache": {"apt": True}}, {"cache": "apt"}) == {"cache": "apt"}


def test_freeze_is_read_only():
    frozen = freeze({"a": {"b": [1, {"c": 2}]}})
    with pytest.raises(TypeError):
        frozen["a"] = 1
    with pytest.raises(TypeError):
        frozen["a"]["x"] = 1
    assert frozen["a"]["b"][0] == 1
    assert isinstance(frozen["a"]["b"], tuple)


def test_payload_from_bare_config():
    payload = payload_from_dict({"language": "c"})
    assert payload.config == {"language": "c"}
    assert payload.paranoid is False


def test_payload_from_full_payload():
    payload = payload_from_dict(
        {"config": {"language": "c"}, "env_vars": [{"name": "A", "value": "1"}]}
    )
    assert payload.env_vars[0].public is False


def test_payload_rejects_non_mapping():
    with pytest.raises(TypeError):
        payload_from_dict(["language", "c"])


def test_parse_env():
    assert parse_env("A=1 B=\"x y\" C=$(pwd) D='q r' E=") == [
        EnvVar("A", "1"),
        EnvVar("B", '"x y"'),
        EnvVar("C", "$(pwd)"),
        EnvVar("D", "'q r'"),
        EnvVar("E", ""),
    ]


def test_parse_env_secure_prefix():
    assert parse_env("SECURE TOKEN=abc PLAIN=1") == [
        EnvVar("TOKEN", "abc", secure=True),
        EnvVar("PLAIN", "1"),
    ]


def test_env_groups():
    data = BuildData(
        {"env": ["FOO=bar", {"secure": "TOKEN=abc"}]},
        Payload(env_vars=[{"name": "API", "value": "k", "public": True}]),
    )
    settings, config = data.env_vars_groups
    assert settings.source == REPOSITORY_SETTINGS
    assert settings.vars == (EnvVar("API", "k", secure=False),)
    assert config.source == CONFIG_FILE
    assert config.vars == (EnvVar("FOO", "bar"), EnvVar("TOKEN", "abc", secure=True))


def test_env_global_and_matrix():
    data = BuildData({"env": {"matrix": ["B=2"], "global": ["A=1"]}})
    _, config = data.env_vars_groups
    assert [v.key for v in config.vars] == ["A", "B"]


def test_empty_groups_are_not_announced():
    settings, config = BuildData({}).env_vars_groups
    assert not settings.announce
    assert not config.announce


def test_exported_env_order_and_redaction():
    from cibuild import compile_script

    text = compile_script(
        {
            "config": {"env": ["FOO=bar BAZ='a b'", {"secure": "TOKEN=s3cr3t"}]},
            "env_vars": [
                {"name": "API", "value": "k", "public": True},
                {"name": "PW", "value": "hunter2"},
            ],
        }
    )
    pos = -1
    for needle in [
        "Setting environment variables from repository settings",
        "echo '$ export API=k'\nexport API=k",
        "echo '$ export PW=[secure]'\nexport PW=hunter2",
        "Setting environment variables from .cibuild.yml",
        "export FOO=bar",
        "export BAZ='a b'",
        "echo '$ export TOKEN=[secure]'\nexport TOKEN=s3cr3t",
    ]:
        found = text.find(needle, pos + 1)
        assert found > pos, needle
        pos = found
    assert text.count("hunter2") == 1
    assert text.count("s3cr3t") == 1
    assert "export CIBUILD=true" in text
    assert "$ export CIBUILD=true" not in text


@pytest.mark.parametrize(
    "setting,apt,directories",
    [
        (None, False, ()),
        ("apt", True, ()),
        (["apt", "bundler"], True, ()),
        ({"apt": True, "directories": ["a", "b"]}, True, ("a", "b")),
        ({"directories": ["a"]}, False, ("a",)),
    ],
)
def test_cache_settings(setting, apt, directories):
    data = BuildData({"cache": setting})
    assert data.cache("apt") is apt
    assert data.cache_directories == directories


def test_build_data_language_default():
    assert BuildData({}).language == "generic"
    assert BuildData({"language": "c"}).language == "c"


def test_status_of():
    assert status_of({}) is ConfigStatus.OK
    assert status_of({".result": "configured"}) is ConfigStatus.OK
    assert status_of({".result": "not_found"}) is ConfigStatus.NOT_FOUND
    assert status_of({".result": "server_error"}) is ConfigStatus.SERVER_ERROR
    assert status_of({".result": "bogus"}) is ConfigStatus.OK


def test_payload_resolver_validates():
    with pytest.raises(ConfigurationFault, match="Invalid payload"):
        PayloadResolver({"config": {}, "paranoid": "sometimes"})


def test_yaml_resolver(payload_file):
    path = payload_file({"config": {"language": "c"}, "paranoid": True})
    resolution = YamlFileResolver(path).resolve()
    assert resolution.status is ConfigStatus.OK
    assert resolution.payload.config == {"language": "c"}
    assert resolution.payload.paranoid is True


def test_yaml_resolver_missing_file(tmp_path):
    resolution = YamlFileResolver(tmp_path / "nope.yml").resolve()
    assert resolution.status is ConfigStatus.NOT_FOUND
    assert resolution.payload.config == {}


def test_yaml_resolver_empty_file(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert YamlFileResolver(path).resolve().payload.config == {}


def test_yaml_resolver_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("language: [c\n")
    with pytest.raises(ConfigurationFault, match="Invalid YAML") as exc:
        YamlFileResolver(path).resolve()
    assert exc.value.exit_code == 2


def test_yaml_resolver_non_mapping(tmp_path):
    path = tmp_path / "list.yml"
    path.write_text("- c\n- haskell\n")
    with pytest.raises(ConfigurationFault):
        YamlFileResolver(path).resolve()
