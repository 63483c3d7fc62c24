"""Shared fixtures for cibuild tests."""

import logging

import pytest
import yaml

from cibuild.shell import Renderer, ShellBuilder


@pytest.fixture(autouse=True)
def reset_cibuild_logger():
    """The CLI reconfigures the package logger; undo it between tests."""
    yield
    logger = logging.getLogger("cibuild")
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sh():
    return ShellBuilder()


@pytest.fixture
def render():
    """Finish a builder and render its tree to text."""

    def _render(builder: ShellBuilder) -> str:
        return Renderer().render(builder.finish())

    return _render


@pytest.fixture
def payload_file(tmp_path):
    """Write a payload mapping to a YAML file and return its path."""

    def _write(data, name="payload.yml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return _write
