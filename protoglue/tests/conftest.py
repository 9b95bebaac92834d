"""Unit tests configuration file."""

import os
import sys
import types

import pytest

from protoglue.generator import GeneratorOptions, Naming, load_json
from protoglue.generator.python import render

FILE_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), "generator")


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def addressbook():
    """A fresh pool holding common.proto and tutorial/addressbook.proto."""
    with open(os.path.join(FILE_DIR, "addressbook.json"), encoding="utf-8") as f:
        return load_json(f.read())


@pytest.fixture
def gen_module():
    """Render a file and import the result, dependencies first."""
    loaded: list[str] = []

    def load(pool, file_name, options=None):
        proto_file = pool.file(file_name)
        for dependency in proto_file.dependencies:
            load(pool, dependency, options)

        name = Naming(pool).module_name(proto_file)
        module = types.ModuleType(name)
        code = render(proto_file, pool, options or GeneratorOptions())
        sys.modules[name] = module
        loaded.append(name)
        exec(compile(code, f"<{name}>", "exec"), module.__dict__)
        return module

    yield load

    for name in loaded:
        sys.modules.pop(name, None)
