"""chefkit - Recipe quantities and recipe file lookup for cooklang collections."""

__version__ = "0.1.0"

from .fs import FsIndex, NotFound, RecipeContent, RecipeEntry, all_recipes
from .images import Image, check_recipe_images, recipe_images
from .quantity import (
    ByServings,
    Fixed,
    Linear,
    Number,
    Quantity,
    QuantityAddError,
    QuantityUnit,
    QuantityValue,
    Range,
    Scalable,
    Text,
    UnitInfo,
)
from .units import BasicConverter, Converter, Unit

__all__ = [
    "FsIndex",
    "NotFound",
    "RecipeEntry",
    "RecipeContent",
    "all_recipes",
    "Image",
    "recipe_images",
    "check_recipe_images",
    "Quantity",
    "QuantityAddError",
    "QuantityValue",
    "QuantityUnit",
    "UnitInfo",
    "Fixed",
    "Scalable",
    "Linear",
    "ByServings",
    "Number",
    "Range",
    "Text",
    "Converter",
    "BasicConverter",
    "Unit",
]
