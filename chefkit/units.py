"""Unit definitions and the converter used to resolve and convert quantities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .quantity import Quantity


class PhysicalQuantity(str, Enum):
    """Dimensional category of a unit."""

    MASS = "mass"
    VOLUME = "volume"
    LENGTH = "length"
    TEMPERATURE = "temperature"
    TIME = "time"

    def __str__(self) -> str:
        return self.value


class System(str, Enum):
    """Unit system a unit belongs to."""

    METRIC = "metric"
    IMPERIAL = "imperial"


class ConvertTo(Enum):
    """Conversion targets other than a concrete unit."""

    SAME_SYSTEM = "same_system"


class UnknownUnitError(Exception):
    """Raised when a unit text does not name a known unit."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Unknown unit: '{text}'")


class ConvertError(Exception):
    """Raised when a quantity cannot be converted."""

    pass


@dataclass(frozen=True)
class Unit:
    """A known unit."""

    name: str
    symbol: str
    physical_quantity: PhysicalQuantity
    ratio: float
    difference: float = 0.0
    system: System | None = None
    aliases: tuple[str, ...] = field(default=())

    def __str__(self) -> str:
        return self.symbol


class Converter(Protocol):
    """What the quantity model needs from a unit converter."""

    def get_unit(self, text: str) -> Unit: ...

    def convert(self, quantity: Quantity, to: Unit | ConvertTo) -> Quantity: ...


# name, symbol, physical quantity, ratio to base unit, system, aliases
# Base units: g, ml, m, s. Temperatures are converted through celsius.
_UNITS: list[Unit] = [
    # Mass -> grams
    Unit("milligram", "mg", PhysicalQuantity.MASS, 0.001, system=System.METRIC),
    Unit("gram", "g", PhysicalQuantity.MASS, 1.0, system=System.METRIC, aliases=("gr", "grams")),
    Unit(
        "kilogram",
        "kg",
        PhysicalQuantity.MASS,
        1000.0,
        system=System.METRIC,
        aliases=("kilo", "kilograms"),
    ),
    Unit("ounce", "oz", PhysicalQuantity.MASS, 28.349523125, system=System.IMPERIAL, aliases=("ounces",)),
    Unit(
        "pound",
        "lb",
        PhysicalQuantity.MASS,
        453.59237,
        system=System.IMPERIAL,
        aliases=("lbs", "pounds"),
    ),
    # Volume -> milliliters
    Unit("milliliter", "ml", PhysicalQuantity.VOLUME, 1.0, system=System.METRIC, aliases=("millilitre",)),
    Unit("centiliter", "cl", PhysicalQuantity.VOLUME, 10.0, system=System.METRIC),
    Unit("deciliter", "dl", PhysicalQuantity.VOLUME, 100.0, system=System.METRIC),
    Unit(
        "liter",
        "l",
        PhysicalQuantity.VOLUME,
        1000.0,
        system=System.METRIC,
        aliases=("litre", "liters", "litres"),
    ),
    Unit(
        "teaspoon",
        "tsp",
        PhysicalQuantity.VOLUME,
        4.92892159375,
        system=System.IMPERIAL,
        aliases=("teaspoons",),
    ),
    Unit(
        "tablespoon",
        "tbsp",
        PhysicalQuantity.VOLUME,
        14.78676478125,
        system=System.IMPERIAL,
        aliases=("tbs", "tablespoons"),
    ),
    Unit("cup", "c", PhysicalQuantity.VOLUME, 236.5882365, system=System.IMPERIAL, aliases=("cups",)),
    # Length -> meters
    Unit("millimeter", "mm", PhysicalQuantity.LENGTH, 0.001, system=System.METRIC),
    Unit("centimeter", "cm", PhysicalQuantity.LENGTH, 0.01, system=System.METRIC),
    Unit("meter", "m", PhysicalQuantity.LENGTH, 1.0, system=System.METRIC),
    Unit("inch", "in", PhysicalQuantity.LENGTH, 0.0254, system=System.IMPERIAL, aliases=("inches",)),
    # Temperature -> celsius
    Unit("celsius", "°C", PhysicalQuantity.TEMPERATURE, 1.0, system=System.METRIC, aliases=("C",)),
    Unit(
        "fahrenheit",
        "°F",
        PhysicalQuantity.TEMPERATURE,
        5 / 9,
        difference=-160 / 9,
        system=System.IMPERIAL,
        aliases=("F",),
    ),
    # Time -> seconds (no system, never fitted)
    Unit("second", "s", PhysicalQuantity.TIME, 1.0, aliases=("sec", "seconds")),
    Unit("minute", "min", PhysicalQuantity.TIME, 60.0, aliases=("minutes",)),
    Unit("hour", "h", PhysicalQuantity.TIME, 3600.0, aliases=("hours",)),
]

# Units that are candidates when fitting a quantity to its best unit
BEST_FIT: set[str] = {"g", "kg", "oz", "lb", "ml", "l", "tsp", "tbsp", "c", "mm", "cm", "m", "in"}


class BasicConverter:
    """Table driven converter with common metric and imperial cooking units."""

    def __init__(self, units: list[Unit] | None = None, best_fit: set[str] | None = None):
        self.units = list(units if units is not None else _UNITS)
        self.best_fit = best_fit if best_fit is not None else BEST_FIT
        self._index: dict[str, Unit] = {}
        for unit in self.units:
            for key in (unit.symbol, unit.name, *unit.aliases):
                self._index.setdefault(key, unit)
        self.lookups = 0

    def get_unit(self, text: str) -> Unit:
        """Find a unit by symbol, name or alias.

        Exact matches win over case-insensitive ones.
        """
        self.lookups += 1
        key = text.strip()
        unit = self._index.get(key) or self._index.get(key.lower())
        if unit is None:
            raise UnknownUnitError(text)
        return unit

    def convert(self, quantity: Quantity, to: Unit | ConvertTo) -> Quantity:
        """
        Convert a quantity to another unit.

        Args:
            quantity: Quantity with a unit known by this converter
            to: Target unit, or ConvertTo.SAME_SYSTEM for the best fitting
                unit in the quantity's own system

        Returns:
            New quantity with the target unit already resolved

        Raises:
            ConvertError: If the quantity has no known unit, contains text
                values, or the target measures something else
        """
        from .quantity import Quantity

        if quantity.unit_text is None:
            raise ConvertError("Cannot convert a quantity without unit")
        try:
            source = self.get_unit(quantity.unit_text)
        except UnknownUnitError as e:
            raise ConvertError(str(e)) from e

        if quantity.value.contains_text_value():
            raise ConvertError(f"Cannot convert text value '{quantity.value}'")

        if to is ConvertTo.SAME_SYSTEM:
            target = self._best_fit(quantity, source)
        else:
            target = to

        if target.physical_quantity != source.physical_quantity:
            raise ConvertError(
                f"Cannot convert {source.physical_quantity} '{source.symbol}' "
                f"to {target.physical_quantity} '{target.symbol}'"
            )

        value = quantity.value.map_numbers(lambda n: _convert_number(n, source, target))
        return Quantity.with_known_unit(value, target.symbol, target)

    def _best_fit(self, quantity: Quantity, source: Unit) -> Unit:
        # Units outside any system are kept as they are
        if source.system is None:
            return source

        candidates = sorted(
            (
                u
                for u in self.units
                if u.symbol in self.best_fit
                and u.system == source.system
                and u.physical_quantity == source.physical_quantity
            ),
            key=lambda u: u.ratio,
        )
        if not candidates:
            return source

        magnitude = abs(quantity.value.first_number())
        best = candidates[0]
        for unit in candidates:
            if abs(_convert_number(magnitude, source, unit)) >= 1:
                best = unit
        return best


def _convert_number(value: float, source: Unit, target: Unit) -> float:
    if source == target:
        return value
    base = value * source.ratio + source.difference
    return (base - target.difference) / target.ratio
