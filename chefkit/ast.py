"""Quantity nodes as produced by the recipe parser."""

from dataclasses import dataclass, field

from .quantity import Value


@dataclass
class SingleValue:
    """A single parsed value.

    ``auto_scale`` is set when the recipe marks the value to be scaled with
    the servings (the ``*`` marker in the recipe text).
    """

    value: Value
    auto_scale: bool = False


@dataclass
class ManyValues:
    """One value per serving count, as written in the recipe (``2|3|4``)."""

    values: list[Value] = field(default_factory=list)


QuantityNode = SingleValue | ManyValues
