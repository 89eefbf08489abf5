"""
Find recipes and their related files in a directory tree.

``FsIndex`` is lazy: it walks the tree only when asked for a recipe it has
not seen yet, and it remembers everything it walked past. Lookups mutate
the index, so an index must not be shared between threads without a lock.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from .config import RECIPE_EXTENSION
from .images import Image, recipe_images

logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class FsError(Exception):
    """Base exception for recipe lookups."""

    pass


class NotFound(FsError):
    """Raised when a recipe is not in the index."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Recipe not found: '{name}'")


class InvalidName(FsError):
    """Raised when a recipe name has no file stem."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid name: '{name}'")


class WalkError(FsError):
    """Raised when a directory can't be read while walking the tree."""

    def __init__(self, path: Path, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"Error reading '{path}': {error}")


class NonUtf8Error(FsError):
    """Raised for paths that are not valid UTF-8."""

    def __init__(self, path: Path | str):
        self.path = path
        super().__init__(f"Non UTF-8 path: {os.fsencode(path)!r}")


class NotRecipe(Exception):
    """Raised when converting a directory entry that is not a recipe file."""

    def __init__(self, entry: DirEntry):
        self.entry = entry
        super().__init__(f"The entry is not a recipe: {entry.path}")


def _check_utf8(path: Path | str) -> None:
    try:
        str(path).encode("utf-8")
    except UnicodeEncodeError as e:
        raise NonUtf8Error(path) from e


# ============================================================================
# Walking
# ============================================================================


@dataclass(frozen=True)
class DirEntry:
    """A file or directory found while walking."""

    path: Path
    depth: int
    is_file: bool
    is_dir: bool

    @property
    def file_name(self) -> str:
        return self.path.name or str(self.path)

    @property
    def file_stem(self) -> str:
        return self.path.stem or str(self.path)


def is_recipe_file(entry: DirEntry) -> bool:
    return entry.is_file and entry.path.suffix == f".{RECIPE_EXTENSION}"


def _files_first(entry: DirEntry) -> tuple[bool, str]:
    return (not entry.is_file, entry.file_name)


def _by_name(entry: DirEntry) -> str:
    return entry.file_name


class _Walker:
    """
    Depth-first walk of a directory tree that hands out one entry at a time.

    The walk can be resumed at any point and never rewinds. The root is the
    first entry (depth 0); directories are read only when the walk reaches
    their contents, and only up to ``max_depth``. Within a directory, entries
    are ordered by ``sort_key``.

    A directory that can't be read raises ``WalkError`` once, and the walk
    continues after it on the next call.
    """

    def __init__(self, root: Path, max_depth: int, sort_key: Callable[[DirEntry], Any]):
        self.root = root
        self.max_depth = max_depth
        self._sort_key = sort_key
        self._started = False
        self._descend: DirEntry | None = None
        # Pending entries per open directory, in reverse order
        self._stack: list[list[DirEntry]] = []
        self.visited = 0

    @property
    def exhausted(self) -> bool:
        return self._started and self._descend is None and not self._stack

    def next_entry(self) -> DirEntry | None:
        """Get the next entry, or None when the walk is over."""
        if not self._started:
            self._started = True
            return self._root_entry()

        if self._descend is not None:
            directory, self._descend = self._descend, None
            self._open(directory)

        while self._stack:
            pending = self._stack[-1]
            if not pending:
                self._stack.pop()
                continue

            entry = pending.pop()
            if entry.is_dir and entry.depth < self.max_depth:
                self._descend = entry
            self.visited += 1
            _check_utf8(entry.path)
            return entry

        return None

    def _root_entry(self) -> DirEntry:
        try:
            mode = os.stat(self.root).st_mode
        except OSError as e:
            raise WalkError(self.root, e) from e

        entry = DirEntry(
            path=self.root,
            depth=0,
            is_file=stat.S_ISREG(mode),
            is_dir=stat.S_ISDIR(mode),
        )
        if entry.is_dir and self.max_depth > 0:
            self._descend = entry
        self.visited += 1
        _check_utf8(entry.path)
        return entry

    def _open(self, directory: DirEntry) -> None:
        try:
            with os.scandir(directory.path) as it:
                children = [
                    DirEntry(
                        path=Path(e.path),
                        depth=directory.depth + 1,
                        is_file=e.is_file(follow_symlinks=False),
                        is_dir=e.is_dir(follow_symlinks=False),
                    )
                    for e in it
                ]
        except OSError as e:
            raise WalkError(directory.path, e) from e

        children.sort(key=self._sort_key, reverse=True)
        self._stack.append(children)


def all_recipes(base_path: Path | str, max_depth: int) -> Iterator[DirEntry]:
    """
    Lazily list the directories and recipe files under a path.

    Entries are sorted by name within each directory. Entries that can't be
    read are skipped.

    Args:
        base_path: Directory to list (yielded first, at depth 0)
        max_depth: Maximum depth to descend to
    """
    walker = _Walker(Path(base_path), max_depth, sort_key=_by_name)
    while not walker.exhausted:
        try:
            entry = walker.next_entry()
        except FsError as e:
            logger.debug("Skipping entry: %s", e)
            continue
        if entry is None:
            break
        if entry.is_dir or is_recipe_file(entry):
            yield entry


# ============================================================================
# Index
# ============================================================================


@dataclass
class _Cache:
    recipes: dict[str, list[Path]] = field(default_factory=dict)
    # First path of each stem in walk order
    first_walked: dict[str, Path] = field(default_factory=dict)
    non_existent: set[str] = field(default_factory=set)

    def get(self, name: str, recipe: str, base_path: Path) -> Path | None:
        paths = self.recipes.get(name)
        if not paths:
            return None

        query = Path(recipe)
        target = (base_path / query).with_suffix(f".{RECIPE_EXTENSION}")
        for path in paths:
            if path == target or path == query:
                return path

        # Plain names match the first recipe with that stem the walk found
        if query.parent == Path("."):
            return self.first_walked.get(name)
        return None

    def insert(self, name: str, path: Path, walked: bool = False) -> None:
        paths = self.recipes.setdefault(name, [])
        if path not in paths:
            paths.append(path)
        if walked:
            self.first_walked.setdefault(name, path)

    def mark_non_existent(self, recipe: str) -> None:
        self.non_existent.add(recipe)


def _recipe_name(recipe: str) -> str:
    name = Path(recipe).stem
    # Empty, "..", or only an extension like ".cook"
    if not name or name.startswith("."):
        raise InvalidName(recipe)
    return name


class FsIndex:
    """
    Index of a directory for recipes.

    The index is lazy: it only walks the directory when asked for something
    it doesn't know yet. Every recipe file walked past is cached, and names
    that were not found are remembered as missing for the life of the index.
    """

    def __init__(self, base_path: Path | str, max_depth: int):
        self.base_path = Path(base_path)
        _check_utf8(self.base_path)
        self.max_depth = max_depth
        self._cache = _Cache()
        self._walker = _Walker(self.base_path, max_depth, sort_key=_files_first)

    def contains(self, recipe: str) -> bool:
        """Check if the index contains a recipe. Like ``get``, this may walk the tree."""
        try:
            self.get(recipe)
        except FsError:
            return False
        return True

    def get(self, recipe: str) -> RecipeEntry:
        """
        Get a recipe from the index.

        Args:
            recipe: A recipe name, or a path relative to the base path, with
                or without the recipe extension

        Returns:
            The recipe entry

        Raises:
            InvalidName: If the name has no file stem
            NotFound: If no recipe matches
            WalkError: If a directory can't be read while searching
            NonUtf8Error: If a non UTF-8 path is found while searching
        """
        name = _recipe_name(recipe)

        cached = self._cache.get(name, recipe, self.base_path)
        if cached is not None:
            logger.debug("Cache hit for '%s': %s", recipe, cached)
            return RecipeEntry(cached)
        if recipe in self._cache.non_existent:
            logger.debug("'%s' is known to be missing", recipe)
            raise NotFound(recipe)

        # Is a file relative to base?
        possible_path = (self.base_path / recipe).with_suffix(f".{RECIPE_EXTENSION}")
        if possible_path.is_file():
            logger.debug("Found '%s' at %s", recipe, possible_path)
            self._cache.insert(name, possible_path)
            return RecipeEntry(possible_path)

        # Walk until found or no more files
        while True:
            entry = self._walker.next_entry()
            if entry is None:
                break
            if not is_recipe_file(entry):
                continue

            self._cache.insert(entry.file_stem, entry.path, walked=True)
            if entry.file_stem == name:
                logger.debug("Found '%s' walking at %s", recipe, entry.path)
                return RecipeEntry(entry.path)

        logger.debug("'%s' not found, marking as missing", recipe)
        self._cache.mark_non_existent(recipe)
        raise NotFound(recipe)


# ============================================================================
# Recipes
# ============================================================================


class RecipeParser(Protocol):
    """The parts of a recipe parser used by ``RecipeContent``."""

    def parse_metadata(self, text: str) -> Any: ...

    def parse(self, text: str, recipe_name: str) -> Any: ...


@dataclass(frozen=True)
class RecipeEntry:
    """Path to a recipe file."""

    path: Path

    @classmethod
    def from_dir_entry(cls, entry: DirEntry) -> RecipeEntry:
        """
        Raises:
            NotRecipe: If the entry is not a recipe file
        """
        if not is_recipe_file(entry):
            raise NotRecipe(entry)
        return cls(entry.path)

    @property
    def name(self) -> str:
        return self.path.stem

    def read(self) -> RecipeContent:
        """Read the recipe file. OSError is propagated."""
        content = self.path.read_text(encoding="utf-8")
        return RecipeContent(path=self.path, content=content)

    def images(self) -> list[Image]:
        return recipe_images(self.path)


@dataclass(frozen=True)
class RecipeContent:
    """Text of a recipe file."""

    path: Path
    content: str

    @property
    def text(self) -> str:
        return self.content

    def metadata(self, parser: RecipeParser) -> Any:
        return parser.parse_metadata(self.content)

    def parse(self, parser: RecipeParser) -> Any:
        return parser.parse(self.content, self.path.stem)
