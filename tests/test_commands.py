"""Tests for the toolpath CLI commands."""

import json
import logging
import os
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from toolpath.main import cli
from toolpath.platform_facts import PlatformFacts
from toolpath.search_path import SearchPaths
from toolpath.settings import SettingsPaths


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_search_paths():
    """Patch build_search_paths to return fixed entries on a Unix platform."""

    def _install(*entries: str):
        search_paths = SearchPaths(platform=PlatformFacts(family="unix", home="/home/u"), paths=entries)
        return patch("toolpath.main.build_search_paths", return_value=search_paths)

    return _install


@pytest.fixture
def isolated_settings(tmp_path):
    """Point AppSettings at a temporary directory tree."""
    paths = SettingsPaths(
        global_settings=tmp_path / "home" / ".toolpath" / "settings.yaml",
        project_settings=tmp_path / "project" / ".toolpath" / "settings.yaml",
        local_settings=tmp_path / "project" / ".toolpath" / "settings.local.yaml",
    )
    with patch("toolpath.settings.SettingsPaths.default", return_value=paths):
        yield paths


class TestEnvCommand:
    def test_prints_rendered_path(self, runner, fake_search_paths):
        with fake_search_paths("/a", "/b"):
            result = runner.invoke(cli, ["env"], env={"PATH": "/c:/d"})
        assert result.exit_code == 0
        assert result.output.strip() == "/a:/b:/c:/d"

    def test_encoding_error_exits_with_status_1(self, runner, fake_search_paths):
        with fake_search_paths("/bad:entry"):
            result = runner.invoke(cli, ["env"], env={"PATH": "/c"})
        assert result.exit_code == 1
        assert "Invalid Search Path" in result.output

    def test_no_npm_flag_is_forwarded(self, runner):
        search_paths = SearchPaths(platform=PlatformFacts(family="unix"), paths=())
        with patch("toolpath.main.build_search_paths", return_value=search_paths) as build:
            runner.invoke(cli, ["env", "--no-npm"], env={"PATH": "/c"})
        build.assert_called_once_with(False)


class TestBuildSearchPaths:
    def test_npm_included_by_default(self):
        from toolpath.main import build_search_paths

        base = MagicMock()
        with patch("toolpath.main.SearchPaths.builder", return_value=base):
            result = build_search_paths(True)
        base.with_npm.assert_called_once_with()
        assert result is base.with_npm.return_value

    def test_npm_skipped(self):
        from toolpath.main import build_search_paths

        base = MagicMock()
        with patch("toolpath.main.SearchPaths.builder", return_value=base):
            result = build_search_paths(False)
        base.with_npm.assert_not_called()
        assert result is base


class TestShowCommand:
    def test_lists_entries_in_order(self, runner, fake_search_paths, tmp_path):
        with fake_search_paths(str(tmp_path), "/does/not/exist"):
            result = runner.invoke(cli, ["show"])
        assert result.exit_code == 0
        assert "Search Paths" in result.output
        assert "/does/not/exist" in result.output


@pytest.mark.skipif(os.name == "nt", reason="uses POSIX executables and separators")
class TestWhichAndExec:
    def _make_executable(self, directory, name, body="exit 0"):
        directory.mkdir(parents=True, exist_ok=True)
        exe = directory / name
        exe.write_text(f"#!/bin/sh\n{body}\n")
        exe.chmod(0o755)
        return exe

    def test_which_finds_executable(self, runner, fake_search_paths, tmp_path):
        exe = self._make_executable(tmp_path / "tools", "helper-tool")
        with fake_search_paths(str(tmp_path / "tools")):
            result = runner.invoke(cli, ["which", "helper-tool"], env={"PATH": ""})
        assert result.exit_code == 0
        assert result.output.strip() == str(exe)

    def test_which_not_found(self, runner, fake_search_paths, tmp_path):
        with fake_search_paths(str(tmp_path)):
            result = runner.invoke(cli, ["which", "definitely-not-here"], env={"PATH": str(tmp_path)})
        assert result.exit_code == 1

    def test_exec_runs_with_extended_path(self, runner, fake_search_paths, tmp_path):
        self._make_executable(tmp_path / "tools", "helper-tool", body='exit "$1"')
        with fake_search_paths(str(tmp_path / "tools")):
            result = runner.invoke(cli, ["exec", "helper-tool", "3"], env={"PATH": "/usr/bin:/bin"})
        assert result.exit_code == 3

    def test_exec_child_sees_extended_path(self, runner, fake_search_paths, tmp_path):
        out = tmp_path / "path.txt"
        self._make_executable(tmp_path / "tools", "helper-tool", body=f'printf "%s" "$PATH" > "{out}"')
        with fake_search_paths(str(tmp_path / "tools")):
            result = runner.invoke(cli, ["exec", "helper-tool"], env={"PATH": "/usr/bin:/bin"})
        assert result.exit_code == 0
        assert out.read_text() == f"{tmp_path / 'tools'}:/usr/bin:/bin"

    def test_exec_missing_command(self, runner, fake_search_paths, tmp_path):
        with fake_search_paths(str(tmp_path)):
            result = runner.invoke(cli, ["exec", "definitely-not-here"], env={"PATH": str(tmp_path)})
        assert result.exit_code == 127

    def test_exec_encoding_error(self, runner, fake_search_paths):
        with fake_search_paths("/bad:entry"):
            result = runner.invoke(cli, ["exec", "sh"], env={"PATH": "/bin"})
        assert result.exit_code == 1


class TestPathsCommands:
    def test_add_then_list(self, runner, isolated_settings):
        result = runner.invoke(cli, ["paths", "add", "~/tools/bin"])
        assert result.exit_code == 0
        assert "Added" in result.output
        assert yaml.safe_load(isolated_settings.global_settings.read_text()) == {"search_paths": ["~/tools/bin"]}

        result = runner.invoke(cli, ["paths", "list"], env={"TOOLPATH_SEARCH_PATHS": None})
        assert result.exit_code == 0
        assert "~/tools/bin" in result.output

    def test_add_to_project_scope(self, runner, isolated_settings):
        result = runner.invoke(cli, ["paths", "add", "/opt/x", "--project"])
        assert result.exit_code == 0
        assert "Remember to commit" in result.output
        assert yaml.safe_load(isolated_settings.project_settings.read_text()) == {"search_paths": ["/opt/x"]}
        assert not isolated_settings.global_settings.exists()

    def test_remove(self, runner, isolated_settings):
        runner.invoke(cli, ["paths", "add", "/a", "--local"])
        result = runner.invoke(cli, ["paths", "remove", "/a", "--local"])
        assert result.exit_code == 0
        assert yaml.safe_load(isolated_settings.local_settings.read_text()) == {"search_paths": []}

    def test_remove_missing_fails(self, runner, isolated_settings):
        result = runner.invoke(cli, ["paths", "remove", "/nope"])
        assert result.exit_code == 1
        assert "not configured" in result.output

    def test_clear(self, runner, isolated_settings):
        runner.invoke(cli, ["paths", "add", "/a"])
        result = runner.invoke(cli, ["paths", "clear", "--global"])
        assert result.exit_code == 0
        assert yaml.safe_load(isolated_settings.global_settings.read_text()) == {}

    def test_list_empty(self, runner, isolated_settings):
        result = runner.invoke(cli, ["paths", "list"], env={"TOOLPATH_SEARCH_PATHS": None})
        assert result.exit_code == 0
        assert "No search paths configured" in result.output

    def test_list_notes_environment_override(self, runner, isolated_settings):
        result = runner.invoke(cli, ["paths", "list"], env={"TOOLPATH_SEARCH_PATHS": '["/env"]'})
        assert result.exit_code == 0
        assert "TOOLPATH_SEARCH_PATHS" in result.output

    def test_list_malformed_settings(self, runner, isolated_settings):
        isolated_settings.global_settings.parent.mkdir(parents=True)
        isolated_settings.global_settings.write_text("search_paths: 5\n")
        result = runner.invoke(cli, ["paths", "list"], env={"TOOLPATH_SEARCH_PATHS": None})
        assert result.exit_code == 1
        assert "Invalid Settings" in result.output


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestLogging:
    def test_log_file_option_writes_jsonl(self, runner, fake_search_paths, tmp_path):
        log_file = tmp_path / "toolpath.log.jsonl"
        with fake_search_paths("/bad:entry"):
            result = runner.invoke(cli, ["--log-file", str(log_file), "env"], env={"PATH": "/c"})
        assert result.exit_code == 1
        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert any(r["lvl"] == "ERROR" and "/bad:entry" in r["message"] for r in records)

    def test_logs_command_prints_records(self, runner, tmp_path):
        log_file = tmp_path / "toolpath.log.jsonl"
        log_file.write_text(
            json.dumps({"ts": "t1", "lvl": "INFO", "logger": "toolpath.main", "message": "hello"})
            + "\n"
            + json.dumps({"ts": "t2", "lvl": "ERROR", "logger": "toolpath.main", "message": "boom"})
            + "\n"
        )
        result = runner.invoke(cli, ["logs", "--path", str(log_file), "--filter", "boom"])
        assert result.exit_code == 0
        assert "boom" in result.output
        assert "hello" not in result.output

    def test_logs_command_reads_log_path_from_environment(self, runner, fake_search_paths, tmp_path):
        log_file = tmp_path / "custom.jsonl"
        env = {"TOOLPATH_LOG_PATH": str(log_file), "PATH": "/c"}
        with fake_search_paths("/marker:entry"):
            runner.invoke(cli, ["env"], env=env)
        assert log_file.exists()

        result = runner.invoke(cli, ["logs"], env=env)
        assert result.exit_code == 0
        assert "/marker:entry" in result.output
        assert "No log file" not in result.output

    def test_logs_command_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["logs", "--path", str(tmp_path / "missing.jsonl")])
        assert result.exit_code == 0
        assert "No log file" in result.output
