"""Scaling quantity values to a number of servings."""

from collections.abc import Sequence

from .quantity import ByServings, Fixed, Linear, QuantityValue, Scalable


class ScaleError(Exception):
    """Exception raised when a value can't be scaled to the requested servings."""

    pass


def calculate_scale_factor(
    original_servings: int | None,
    target_servings: int | None = None,
    multiplier: float | None = None,
) -> float:
    """
    Calculate the scaling factor for a recipe.

    Args:
        original_servings: Original recipe serving size
        target_servings: Desired serving size
        multiplier: Direct multiplier (e.g., 2.0 for double)

    Returns:
        Scale factor to multiply quantities by

    Raises:
        ScaleError: If target_servings is given without original_servings
    """
    if multiplier is not None:
        return multiplier

    if target_servings is not None:
        if not original_servings:
            raise ScaleError("Cannot scale by servings: original serving size unknown.")
        return target_servings / original_servings

    return 1.0


def scale_quantity_value(
    value: QuantityValue,
    target_servings: int,
    recipe_servings: Sequence[int],
) -> QuantityValue:
    """
    Resolve a quantity value for a number of servings.

    Args:
        value: The value to scale
        target_servings: Servings to scale to
        recipe_servings: Serving counts declared by the recipe; the first one
            is the base for linear scaling

    Returns:
        A fixed value

    Raises:
        ScaleError: If the recipe declares no servings, or there is no
            explicit value for the target servings
    """
    if isinstance(value, Fixed):
        return value

    if not isinstance(value, Scalable):
        raise TypeError(f"Not a quantity value: {value!r}")
    if not recipe_servings:
        raise ScaleError("Cannot scale a value: the recipe has no servings")

    inner = value.value
    if isinstance(inner, Linear):
        # Text values are kept as written
        factor = calculate_scale_factor(recipe_servings[0], target_servings)
        return Fixed(inner.value).map_numbers(lambda n: n * factor)

    if not isinstance(inner, ByServings):
        raise TypeError(f"Not a scalable value: {inner!r}")
    if target_servings not in recipe_servings:
        raise ScaleError(
            f"{target_servings} servings is not one of the recipe servings: "
            + ", ".join(str(s) for s in recipe_servings)
        )
    index = list(recipe_servings).index(target_servings)
    if index >= len(inner.tiers):
        raise ScaleError(f"No value for {target_servings} servings in '{inner}'")
    return Fixed(inner.tiers[index])
