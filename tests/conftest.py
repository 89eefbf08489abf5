"""Shared fixtures for chefkit tests."""

from pathlib import Path

import pytest

from chefkit.units import BasicConverter


@pytest.fixture
def converter():
    """A fresh converter; ``converter.lookups`` counts unit lookups."""
    return BasicConverter()


def make_files(base: Path, paths: list[str], content: str = "") -> Path:
    """Create empty files (and their directories) under base."""
    for rel in paths:
        path = base / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content or f"Recipe {path.stem}\n", encoding="utf-8")
    return base


@pytest.fixture
def recipes_dir(tmp_path):
    """
    A small recipe collection:

        Bread.cook
        Soup.cook
        notes.txt
        a/Pasta.cook
        a/Stew.cook
        b/Stew.cook
        b/deep/Cake.cook
    """
    base = tmp_path / "recipes"
    return make_files(
        base,
        [
            "Bread.cook",
            "Soup.cook",
            "notes.txt",
            "a/Pasta.cook",
            "a/Stew.cook",
            "b/Stew.cook",
            "b/deep/Cake.cook",
        ],
    )


@pytest.fixture
def make_tree(tmp_path):
    """Factory to build a custom tree of files under tmp_path/tree."""

    def _make(paths: list[str]) -> Path:
        return make_files(tmp_path / "tree", paths)

    return _make
