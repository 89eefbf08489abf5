"""Tests for recipe image association and validation."""

from pathlib import Path
from types import SimpleNamespace

import pytest

from chefkit.images import (
    Image,
    MissingSection,
    MissingStep,
    check_recipe_images,
    recipe_images,
)


def parsed_recipe(*step_counts: int) -> SimpleNamespace:
    """A parsed recipe with the given number of steps per section."""
    return SimpleNamespace(
        sections=[SimpleNamespace(steps=[f"step {i}" for i in range(n)]) for n in step_counts]
    )


class TestRecipeImages:
    """Tests for recipe_images function."""

    def test_name_step_and_section_images(self, make_tree):
        base = make_tree(["Soup.cook", "Soup.jpg", "Soup.2.png", "Soup.1.3.gif", "Other.jpg"])

        images = recipe_images(base / "Soup.cook")

        assert images == [
            Image(indexes=None, path=base / "Soup.jpg"),
            Image(indexes=(0, 2), path=base / "Soup.2.png"),
            Image(indexes=(1, 3), path=base / "Soup.1.3.gif"),
        ]

    @pytest.mark.parametrize(
        "name",
        [
            "Soup",
            "Soup.JPG",
            "Soup.txt",
            "Soup.x.png",
            "Soup.1.x.png",
            "Soup.1.2.3.png",
            "Soup.-1.png",
            "Soupy.jpg",
        ],
    )
    def test_not_an_image_of_the_recipe(self, make_tree, name):
        base = make_tree(["Soup.cook", name])
        assert recipe_images(base / "Soup.cook") == []

    @pytest.mark.parametrize("ext", ["jpeg", "jpg", "png", "heic", "gif", "webp"])
    def test_extensions(self, make_tree, ext):
        base = make_tree(["Soup.cook", f"Soup.{ext}"])
        assert [i.path.name for i in recipe_images(base / "Soup.cook")] == [f"Soup.{ext}"]

    def test_only_same_directory(self, make_tree):
        base = make_tree(["Soup.cook", "photos/Soup.jpg", "Soup.0.jpg"])
        assert [i.path.name for i in recipe_images(base / "Soup.cook")] == ["Soup.0.jpg"]

    def test_directories_ignored(self, make_tree):
        base = make_tree(["Soup.cook"])
        (base / "Soup.png").mkdir()
        assert recipe_images(base / "Soup.cook") == []

    def test_sorted_with_path_as_tie_breaker(self, make_tree):
        base = make_tree(["Soup.cook", "Soup.png", "Soup.10.jpg", "Soup.jpg", "Soup.2.jpg"])
        names = [i.path.name for i in recipe_images(base / "Soup.cook")]
        assert names == ["Soup.jpg", "Soup.png", "Soup.2.jpg", "Soup.10.jpg"]

    def test_dotted_recipe_name_uses_first_part(self, make_tree):
        base = make_tree(["my.soup.cook", "my.jpg", "my.soup.jpg"])
        assert [i.path.name for i in recipe_images(base / "my.soup.cook")] == ["my.jpg"]

    def test_missing_directory(self, tmp_path):
        assert recipe_images(tmp_path / "nope" / "Soup.cook") == []


class TestImageOrder:
    """Tests for Image ordering."""

    def test_whole_recipe_first(self):
        whole = Image(indexes=None, path=Path("z.jpg"))
        step = Image(indexes=(0, 0), path=Path("a.jpg"))
        assert whole < step
        assert sorted([step, whole]) == [whole, step]

    def test_indexes_then_path(self):
        a = Image(indexes=(0, 1), path=Path("b.jpg"))
        b = Image(indexes=(0, 1), path=Path("c.jpg"))
        c = Image(indexes=(1, 0), path=Path("a.jpg"))
        assert sorted([c, b, a]) == [a, b, c]


class TestCheckRecipeImages:
    """Tests for check_recipe_images function."""

    def test_all_valid(self):
        images = [
            Image(indexes=None, path=Path("Soup.jpg")),
            Image(indexes=(0, 2), path=Path("Soup.2.jpg")),
            Image(indexes=(1, 0), path=Path("Soup.1.0.jpg")),
        ]
        assert check_recipe_images(images, parsed_recipe(3, 1)) == []

    def test_missing_step(self):
        images = [Image(indexes=(0, 5), path=Path("Soup.5.jpg"))]
        errors = check_recipe_images(images, parsed_recipe(3, 1))

        assert len(errors) == 1
        assert isinstance(errors[0], MissingStep)
        assert (errors[0].section, errors[0].step) == (0, 5)
        assert errors[0].image == Path("Soup.5.jpg")

    def test_missing_section(self):
        images = [Image(indexes=(9, 0), path=Path("Soup.9.0.jpg"))]
        errors = check_recipe_images(images, parsed_recipe(3, 1))

        assert len(errors) == 1
        assert isinstance(errors[0], MissingSection)
        assert errors[0].section == 9

    def test_collects_all_errors_in_order(self):
        images = [
            Image(indexes=(0, 5), path=Path("Soup.5.jpg")),
            Image(indexes=(0, 1), path=Path("Soup.1.jpg")),
            Image(indexes=(9, 0), path=Path("Soup.9.0.jpg")),
        ]
        errors = check_recipe_images(images, parsed_recipe(3, 1))

        assert [type(e) for e in errors] == [MissingStep, MissingSection]

    def test_whole_recipe_images_always_valid(self):
        images = [Image(indexes=None, path=Path("Soup.jpg"))]
        assert check_recipe_images(images, parsed_recipe()) == []

    def test_error_messages(self):
        images = [Image(indexes=(2, 0), path=Path("Soup.2.0.jpg"))]
        (error,) = check_recipe_images(images, parsed_recipe(1))
        assert str(error) == "No section 2 in recipe, referenced from Soup.2.0.jpg"
