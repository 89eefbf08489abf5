"""Tests for the CLI module."""

import pytest
from click.testing import CliRunner

from chefkit.cli import cli


@pytest.fixture
def runner(monkeypatch):
    """Create a CLI runner for testing."""
    monkeypatch.delenv("CHEFKIT_PATH", raising=False)
    monkeypatch.delenv("CHEFKIT_MAX_DEPTH", raising=False)
    return CliRunner()


class TestMainCli:
    """Tests for the main CLI group."""

    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "find" in result.output
        assert "images" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_invalid_max_depth_env(self, runner, monkeypatch, recipes_dir):
        monkeypatch.setenv("CHEFKIT_MAX_DEPTH", "lots")
        result = runner.invoke(cli, ["--path", str(recipes_dir), "find", "Soup"])
        assert result.exit_code == 1
        assert "CHEFKIT_MAX_DEPTH" in result.output


class TestFind:
    """Tests for the find command."""

    def test_find(self, runner, recipes_dir):
        result = runner.invoke(cli, ["--path", str(recipes_dir), "find", "Stew"])
        assert result.exit_code == 0
        assert str(recipes_dir / "a" / "Stew.cook") in result.output

    def test_path_from_environment(self, runner, monkeypatch, recipes_dir):
        monkeypatch.setenv("CHEFKIT_PATH", str(recipes_dir))
        result = runner.invoke(cli, ["find", "Cake"])
        assert result.exit_code == 0
        assert "Cake.cook" in result.output

    def test_not_found(self, runner, recipes_dir):
        result = runner.invoke(cli, ["--path", str(recipes_dir), "find", "Missing"])
        assert result.exit_code == 1
        assert "Recipe not found: 'Missing'" in result.output

    def test_max_depth(self, runner, recipes_dir):
        result = runner.invoke(cli, ["--path", str(recipes_dir), "-d", "1", "find", "Cake"])
        assert result.exit_code == 1


class TestList:
    """Tests for the list command."""

    def test_list(self, runner, recipes_dir):
        result = runner.invoke(cli, ["--path", str(recipes_dir), "list"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[:4] == ["Bread", "Soup", "a/", "  Pasta"]
        assert "    Cake" in lines
        assert "notes" not in result.output
        assert "6 recipe(s)" in result.output


class TestImages:
    """Tests for the images command."""

    def test_images(self, runner, recipes_dir):
        for name in ["Soup.jpg", "Soup.1.png", "Soup.1.2.png"]:
            (recipes_dir / name).write_bytes(b"")

        result = runner.invoke(cli, ["--path", str(recipes_dir), "images", "Soup"])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("recipe") and lines[0].endswith("Soup.jpg")
        assert lines[1].split() == ["0.1", "Soup.1.png"]
        assert lines[2].split() == ["1.2", "Soup.1.2.png"]

    def test_no_images(self, runner, recipes_dir):
        result = runner.invoke(cli, ["--path", str(recipes_dir), "images", "Bread"])
        assert result.exit_code == 0
        assert "No images for Bread." in result.output


class TestFit:
    """Tests for the fit command."""

    def test_fit(self, runner):
        result = runner.invoke(cli, ["fit", "1500", "g"])
        assert result.exit_code == 0
        assert result.output.strip() == "1.5 kg"

    def test_unknown_unit(self, runner):
        result = runner.invoke(cli, ["fit", "3", "pinch"])
        assert result.exit_code == 0
        assert result.output.strip() == "3 pinch"


class TestConfig:
    """Tests for the config command."""

    def test_config(self, runner, recipes_dir):
        result = runner.invoke(cli, ["--path", str(recipes_dir), "-d", "4", "config"])
        assert result.exit_code == 0
        assert f"Recipes path: {recipes_dir}" in result.output
        assert "not a collection" in result.output
        assert "Max depth: 4" in result.output

    def test_collection(self, runner, recipes_dir):
        (recipes_dir / ".cooklang").mkdir()
        result = runner.invoke(cli, ["--path", str(recipes_dir), "config"])
        assert "not a collection" not in result.output
