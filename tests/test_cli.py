"""Smoke tests for the npm-publish-scripts CLI."""

import pytest
from click.testing import CliRunner

from npm_publish_scripts import __version__
from npm_publish_scripts.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.mark.parametrize("flag", ["-h", "--help"])
def test_help_lists_commands(runner, flag):
    result = runner.invoke(main, [flag])
    assert result.exit_code == 0
    for command in ("init", "serve", "publish-docs", "publish-release"):
        assert command in result.output


@pytest.mark.parametrize("flag", ["-v", "--version"])
def test_version(runner, flag):
    result = runner.invoke(main, [flag])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_no_command_prints_help_and_fails(runner):
    result = runner.invoke(main, [])
    assert result.exit_code == 1
    assert "publish-release" in result.output


def test_invalid_command(runner):
    result = runner.invoke(main, ["publish-everything"])
    assert result.exit_code == 1
    assert "Invalid command given 'publish-everything'" in result.output
    assert "publish-docs" in result.output


def test_unknown_option(runner):
    result = runner.invoke(main, ["--frobnicate"])
    assert result.exit_code == 1
    assert "--frobnicate" in result.output


def test_command_help(runner):
    result = runner.invoke(main, ["publish-release", "--help"])
    assert result.exit_code == 0
    assert "npm release" in result.output


def test_init_creates_defaults(runner, tmp_path):
    result = runner.invoke(main, ["--project-dir", str(tmp_path), "init"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "docs" / "_config.yml").exists()
    assert (tmp_path / "docs" / "index.md").exists()
    assert (tmp_path / "Gemfile").exists()
    assert (tmp_path / ".ruby-version").exists()
    assert (tmp_path / "jsdoc.conf").exists()


def test_init_is_idempotent_and_keeps_edits(runner, tmp_path):
    runner.invoke(main, ["--project-dir", str(tmp_path), "init"])
    (tmp_path / "docs" / "index.md").write_text("# Mine\n")
    snapshot = {
        p: p.read_bytes() for p in tmp_path.rglob("*") if p.is_file()
    }

    result = runner.invoke(main, ["--project-dir", str(tmp_path), "init"])

    assert result.exit_code == 0
    assert "Nothing to do" in result.output
    assert {p: p.read_bytes() for p in tmp_path.rglob("*") if p.is_file()} == snapshot


def test_project_dir_from_environment(runner, tmp_path):
    result = runner.invoke(
        main, ["init"], env={"NPM_PUBLISH_SCRIPTS_PROJECT_DIR": str(tmp_path)}
    )
    assert result.exit_code == 0
    assert (tmp_path / "jsdoc.conf").exists()
