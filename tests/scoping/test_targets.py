"""Tests for concrete settings over process state."""

import contextvars
import io
import os
import sys
import types

import pytest

from ambient.config import get_setting
from ambient.config.settings import save_options
from ambient.scoping import (
    MISSING,
    STDOUT,
    WORKING_DIRECTORY,
    AttributeSetting,
    ContextVarSetting,
    EnvironmentVariable,
    MappingEntry,
    Option,
    OptionTable,
    OptionTableContents,
    RestorationFailure,
    SettingWriteError,
    StreamSetting,
    default_options,
    reset_default_options,
    run_with_override,
)


class TestWorkingDirectory:
    """The process working directory."""

    def test_override_changes_and_restores_cwd(self, tmp_path, restore_cwd):
        """Body runs inside the new directory; the old one comes back."""
        before = os.getcwd()
        seen = run_with_override(WORKING_DIRECTORY, tmp_path, os.getcwd)
        assert os.path.realpath(seen) == os.path.realpath(tmp_path)
        assert os.getcwd() == before

    def test_missing_directory_is_a_write_error(self, tmp_path, restore_cwd):
        """Switching to a directory that does not exist fails without side effects."""
        before = os.getcwd()
        with pytest.raises(SettingWriteError):
            run_with_override(WORKING_DIRECTORY, tmp_path / "nope", lambda: None)
        assert os.getcwd() == before

    def test_restore_failure_when_previous_directory_vanishes(self, tmp_path, restore_cwd):
        """If the previous directory is deleted during the body, restoration fails loudly."""
        doomed = tmp_path / "doomed"
        target = tmp_path / "target"
        doomed.mkdir()
        target.mkdir()
        os.chdir(doomed)

        with pytest.raises(RestorationFailure):
            run_with_override(WORKING_DIRECTORY, target, doomed.rmdir)

    def test_registered_as_cwd(self):
        """The working directory setting is registered by name."""
        assert get_setting("cwd") is WORKING_DIRECTORY


class TestEnvironmentVariable:
    """Single environment variables."""

    def test_set_and_restore_existing(self, monkeypatch):
        """An existing variable gets its old value back."""
        monkeypatch.setenv("AMBIENT_TEST_VAR", "old")
        var = EnvironmentVariable("AMBIENT_TEST_VAR")
        assert run_with_override(var, "new", lambda: os.environ["AMBIENT_TEST_VAR"]) == "new"
        assert os.environ["AMBIENT_TEST_VAR"] == "old"

    def test_unset_variable_is_removed_again(self, monkeypatch):
        """A variable that did not exist is removed after the override."""
        monkeypatch.delenv("AMBIENT_TEST_VAR", raising=False)
        var = EnvironmentVariable("AMBIENT_TEST_VAR")
        assert var.read() is None
        run_with_override(var, "temp", lambda: None)
        assert "AMBIENT_TEST_VAR" not in os.environ

    def test_override_with_none_unsets_temporarily(self, monkeypatch):
        """Overriding with None hides the variable for the body only."""
        monkeypatch.setenv("AMBIENT_TEST_VAR", "present")
        var = EnvironmentVariable("AMBIENT_TEST_VAR")
        assert run_with_override(var, None, lambda: "AMBIENT_TEST_VAR" in os.environ) is False
        assert os.environ["AMBIENT_TEST_VAR"] == "present"

    def test_custom_environ_mapping(self):
        """Any mutable mapping can stand in for os.environ."""
        environ = {"HOME": "/home/a"}
        var = EnvironmentVariable("HOME", environ=environ)
        assert var.write("/home/b") == "/home/a"
        assert environ == {"HOME": "/home/b"}
        assert var.name == "env:HOME"


class TestOptionTable:
    """Option tables and single options."""

    def test_set_returns_previous_values(self):
        """``set`` reports replaced values, MISSING for new keys."""
        table = OptionTable({"digits": 7})
        old = table.set(digits=3, warn=1)
        assert old == {"digits": 7, "warn": MISSING}
        assert table.get("digits") == 3

    def test_set_with_previous_values_undoes_change(self):
        """Feeding the result of ``set`` back restores the table."""
        table = OptionTable({"digits": 7})
        old = table.set(digits=3, warn=1)
        table.set(**old)
        assert table.snapshot() == {"digits": 7}

    def test_option_override(self):
        """One key can be overridden without touching others."""
        table = OptionTable({"digits": 7, "width": 80})
        option = Option(table, "digits")
        assert run_with_override(option, 2, lambda: table.snapshot()) == {"digits": 2, "width": 80}
        assert table.snapshot() == {"digits": 7, "width": 80}

    def test_option_override_of_absent_key_removes_it(self):
        """A key that did not exist is removed on exit."""
        table = OptionTable()
        run_with_override(Option(table, "scipen"), 100, lambda: None)
        assert "scipen" not in table

    def test_contents_setting_replaces_whole_table(self):
        """The whole table can be swapped as one value."""
        table = OptionTable({"a": 1})
        contents = OptionTableContents(table)
        run_with_override(contents, {"b": 2}, lambda: None)
        assert table.snapshot() == {"a": 1}

    def test_from_yaml(self, tmp_path):
        """Tables can be loaded from YAML files."""
        path = tmp_path / "opts.yaml"
        save_options(path, {"digits": 4, "warn": 0})
        table = OptionTable.from_yaml(path)
        assert table.snapshot() == {"digits": 4, "warn": 0}


class TestDefaultOptions:
    """The process-wide option table."""

    def test_empty_without_option_file(self):
        """A missing option file gives an empty default table."""
        assert len(default_options()) == 0

    def test_seeded_from_option_file(self, tmp_path, monkeypatch):
        """The option file named by AMBIENT_OPTIONS_FILE seeds the table."""
        path = tmp_path / "seed.yaml"
        save_options(path, {"digits": 5})
        monkeypatch.setenv("AMBIENT_OPTIONS_FILE", str(path))
        reset_default_options()
        assert default_options().get("digits") == 5

    def test_same_table_until_reset(self):
        """The default table is created once."""
        table = default_options()
        assert default_options() is table
        reset_default_options()
        assert default_options() is not table


class TestStreamSetting:
    """Standard streams."""

    def test_stdout_is_swapped_and_restored(self, capsys):
        """Output written during the override goes to the installed stream."""
        buffer = io.StringIO()
        original = sys.stdout
        run_with_override(STDOUT, buffer, lambda: print("hidden"))
        assert sys.stdout is original
        assert buffer.getvalue() == "hidden\n"
        assert capsys.readouterr().out == ""

    def test_unknown_stream_rejected(self):
        """Only stdout and stderr are supported."""
        with pytest.raises(ValueError):
            StreamSetting("stdlog")

    def test_stdin_rejected(self):
        """stdin is not an overridable stream."""
        with pytest.raises(ValueError, match="stdin"):
            StreamSetting("stdin")


class TestAttributeSetting:
    """Object and module attributes."""

    def test_module_global_override(self):
        """A module-level global can be overridden."""
        module = types.ModuleType("fake_mod")
        module.DEBUG = False
        setting = AttributeSetting(module, "DEBUG")
        assert setting.name == "fake_mod.DEBUG"
        assert run_with_override(setting, True, lambda: module.DEBUG) is True
        assert module.DEBUG is False

    def test_absent_attribute_is_deleted_again(self):
        """An attribute that did not exist is removed on exit."""
        obj = types.SimpleNamespace()
        run_with_override(AttributeSetting(obj, "flag"), 1, lambda: None)
        assert not hasattr(obj, "flag")


class TestMappingEntry:
    """Keys of mutable mappings."""

    def test_existing_key(self):
        """An existing key gets its value back."""
        namespace = {"x": 1}
        run_with_override(MappingEntry(namespace, "x"), 2, lambda: None)
        assert namespace == {"x": 1}

    def test_absent_key_removed(self):
        """A new key is removed on exit."""
        namespace = {}
        entry = MappingEntry(namespace, "y")
        assert entry.read() is MISSING
        assert run_with_override(entry, 5, lambda: namespace["y"]) == 5
        assert namespace == {}


class TestContextVarSetting:
    """Context variables."""

    def test_override_and_restore(self):
        """The variable holds the new value inside and the old value after."""
        var = contextvars.ContextVar("ambient_test_var", default="outer")
        setting = ContextVarSetting(var)
        assert setting.name == "ambient_test_var"
        assert run_with_override(setting, "inner", var.get) == "inner"
        assert var.get() == "outer"

    def test_unset_var_reads_missing(self):
        """A variable with neither a value nor a default reads as MISSING."""
        var = contextvars.ContextVar("ambient_unset_var")
        assert ContextVarSetting(var).read() is MISSING

    def test_never_set_var_is_unset_again(self):
        """Overriding a variable that was never set leaves it unset afterwards."""
        var = contextvars.ContextVar("ambient_fresh_var")
        setting = ContextVarSetting(var)
        assert run_with_override(setting, "x", var.get) == "x"
        with pytest.raises(LookupError):
            var.get()

    def test_own_default_survives_override(self):
        """A variable's own default is read as-is and the variable is not left set."""
        var = contextvars.ContextVar("ambient_default_var", default="outer")
        setting = ContextVarSetting(var)
        assert setting.read() == "outer"
        run_with_override(setting, "inner", lambda: None)
        assert var.get() == "outer"
        assert var not in contextvars.copy_context()

    def test_nested_overrides_unwind_in_order(self):
        """Nested overrides of one variable restore LIFO."""
        var = contextvars.ContextVar("ambient_nested_var")
        setting = ContextVarSetting(var)
        var.set("A")
        seen = []

        def inner():
            seen.append(var.get())
            return run_with_override(setting, "C", lambda: seen.append(var.get()))

        run_with_override(setting, "B", inner)
        seen.append(var.get())
        assert seen == ["B", "C", "A"]

    def test_unset_outside_override_rejected(self):
        """MISSING can only be written back by undoing an earlier write."""
        var = contextvars.ContextVar("ambient_unset_write_var")
        with pytest.raises(ValueError):
            ContextVarSetting(var).write(MISSING)
