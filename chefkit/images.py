"""Images that belong to a recipe, found next to the recipe file.

An image belongs to a recipe when its name is the recipe name plus an image
extension. Optional indexes bind it to a step:

    Soup.jpg        the whole recipe
    Soup.2.jpg      step 2 of the first section
    Soup.1.3.jpg    step 3 of section 1

Indexes are zero-based.
"""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Valid image extensions
IMAGE_EXTENSIONS: tuple[str, ...] = ("jpeg", "jpg", "png", "heic", "gif", "webp")

_INDEX_RE = re.compile(r"[0-9]+")


@functools.total_ordering
@dataclass(frozen=True)
class Image:
    """An image of a recipe, optionally bound to a (section, step)."""

    indexes: tuple[int, int] | None
    path: Path

    @property
    def sort_key(self) -> tuple[bool, tuple[int, int], Path]:
        # Images for the whole recipe go first
        return (self.indexes is not None, self.indexes or (0, 0), self.path)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        return self.sort_key < other.sort_key


def _parse_index(text: str) -> int | None:
    if _INDEX_RE.fullmatch(text):
        return int(text)
    return None


def _decode_image(image_path: Path, recipe_name: str) -> Image | None:
    parts = image_path.name.rsplit(".", 3)
    ext = parts[-1]
    if len(parts) < 2 or ext not in IMAGE_EXTENSIONS or parts[0] != recipe_name:
        return None

    if len(parts) == 2:
        return Image(indexes=None, path=image_path)

    if len(parts) == 3:
        step = _parse_index(parts[1])
        if step is None:
            return None
        return Image(indexes=(0, step), path=image_path)

    section = _parse_index(parts[1])
    step = _parse_index(parts[2])
    if section is None or step is None:
        return None
    return Image(indexes=(section, step), path=image_path)


def recipe_images(path: Path | str) -> list[Image]:
    """
    Get the images of a recipe, sorted.

    Only the files in the same directory as the recipe are checked.

    Args:
        path: Path to the recipe file

    Returns:
        Images sorted by indexes then path

    See IMAGE_EXTENSIONS.
    """
    path = Path(path)
    recipe_name = path.name.split(".", 1)[0]
    directory = path.parent

    images = []
    try:
        with os.scandir(directory) as it:
            entries = [Path(e.path) for e in it if not e.is_dir()]
    except OSError:
        return []

    for image_path in entries:
        image = _decode_image(image_path, recipe_name)
        if image is not None:
            images.append(image)

    images.sort()
    return images


class RecipeImageError(Exception):
    """Base exception for images that reference missing parts of a recipe."""

    def __init__(self, message: str, image: Path):
        self.image = image
        super().__init__(message)


class MissingSection(RecipeImageError):
    def __init__(self, section: int, image: Path):
        self.section = section
        super().__init__(f"No section {section} in recipe, referenced from {image}", image)


class MissingStep(RecipeImageError):
    def __init__(self, section: int, step: int, image: Path):
        self.section = section
        self.step = step
        super().__init__(
            f"No step {step} in section {section}, referenced from {image}", image
        )


def check_recipe_images(images: Sequence[Image], recipe: Any) -> list[RecipeImageError]:
    """
    Check that all images of a recipe reference sections and steps that exist.

    For example the image ``Recipe.14.jpeg`` references the 15th step, but the
    recipe may not have 15 steps.

    Args:
        images: Images of the recipe
        recipe: Parsed recipe, with ``sections`` that have ``steps``

    Returns:
        Every problem found, in the order of the images. Empty if all are valid.
    """
    errors: list[RecipeImageError] = []
    for image in images:
        if image.indexes is None:
            continue

        section_index, step_index = image.indexes
        if section_index >= len(recipe.sections):
            errors.append(MissingSection(section_index, image.path))
            continue

        if step_index >= len(recipe.sections[section_index].steps):
            errors.append(MissingStep(section_index, step_index, image.path))

    return errors
