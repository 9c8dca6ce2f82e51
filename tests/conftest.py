import logging

import pytest

from ambient.config import configuration
from ambient.config.environment import Environment
from ambient.scoping.targets import reset_default_options


@pytest.fixture(autouse=True)
def isolated_configuration(tmp_path, monkeypatch):
    """Point option loading at an empty temp file and restore the settings registry."""
    # caplog listens on the root logger
    monkeypatch.setattr(logging.getLogger("ambient"), "propagate", True)
    monkeypatch.setenv("AMBIENT_OPTIONS_FILE", str(tmp_path / "options.yaml"))
    Environment.reset()
    reset_default_options()
    registry = dict(configuration._registry)

    yield

    configuration._registry.clear()
    configuration._registry.update(registry)
    reset_default_options()
    Environment.reset()


@pytest.fixture
def restore_cwd(monkeypatch):
    """Guarantee the working directory is put back even if a test leaks a chdir."""
    import os

    monkeypatch.chdir(os.getcwd())
