"""Recipe quantities: values, units and the arithmetic between them."""

from __future__ import annotations

import math
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from .units import ConvertError, ConvertTo, Converter, PhysicalQuantity, Unit, UnknownUnitError

if TYPE_CHECKING:
    from .ast import QuantityNode


def format_number(n: float) -> str:
    """Format a number for display, rounded to 3 decimals."""
    if not math.isfinite(n):
        return str(n)
    scaled = abs(n) * 1000
    if math.isfinite(scaled):
        rounded = math.copysign(math.floor(scaled + 0.5), n) / 1000
    else:
        # Too large to have decimals
        rounded = n
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.3f}".rstrip("0").rstrip(".")


# ============================================================================
# Errors
# ============================================================================


class QuantityError(Exception):
    """Base exception for quantity operations."""

    pass


class QuantityAddError(QuantityError):
    """Base exception for everything that can make ``Quantity.try_add`` fail."""

    pass


class NotScaled(QuantityAddError):
    """Raised when a scalable value is used where a single value is needed."""

    def __init__(self, value: ScalableValue):
        self.value = value
        super().__init__(f"Tried to operate on a non scaled value: {value}")


class TextValueError(QuantityAddError):
    """Raised when doing arithmetic with a text value."""

    def __init__(self, value: Value):
        self.value = value
        super().__init__(f"Cannot operate on a text value: '{value}'")


class IncompatibleUnits(QuantityAddError):
    """Raised when two quantities can't be combined because of their units."""

    pass


class AddConvertError(QuantityAddError, ConvertError):
    """Raised when the right hand quantity can't be converted to the left unit."""

    def __init__(self, error: ConvertError):
        self.error = error
        super().__init__(f"Cannot convert to the common unit: {error}")


class MissingUnit(IncompatibleUnits):
    """One quantity has a unit and the other has none.

    ``side`` is the operand that has the unit: ``"left"`` or ``"right"``.
    """

    def __init__(self, found: QuantityUnit, side: Literal["left", "right"]):
        self.found = found
        self.side = side
        super().__init__(
            f"Missing unit: one unit is '{found}' but the other quantity is missing an unit"
        )


class DifferentPhysicalQuantities(IncompatibleUnits):
    """Both units are known but measure different things."""

    def __init__(self, a: PhysicalQuantity, b: PhysicalQuantity):
        self.a = a
        self.b = b
        super().__init__(f"Different physical quantity: '{a}' '{b}'")


class UnknownDifferentUnits(IncompatibleUnits):
    """At least one unit is unknown and the unit texts differ."""

    def __init__(self, a: str, b: str):
        self.a = a
        self.b = b
        super().__init__(f"Unknown units differ: '{a}' '{b}'")


# ============================================================================
# Values
# ============================================================================


class Value:
    """A single amount: a number, an inclusive range or free text."""

    def is_text(self) -> bool:
        return False

    def try_add(self, other: Value) -> Value:
        """
        Add two values.

        Raises:
            TextValueError: If any of the operands is text
        """
        if isinstance(self, Text):
            raise TextValueError(self)
        if isinstance(other, Text):
            raise TextValueError(other)

        if isinstance(self, Number) and isinstance(other, Number):
            return Number(self.value + other.value)
        if isinstance(self, Range) and isinstance(other, Range):
            return Range(self.start + other.start, self.end + other.end)
        # Number + Range in any order shifts the range
        if isinstance(self, Range):
            return _shift(self, other)
        return _shift(other, self)


@dataclass(frozen=True)
class Number(Value):
    value: float

    def __str__(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True)
class Range(Value):
    """Inclusive range. ``start <= end`` is assumed, not checked."""

    start: float
    end: float

    def __str__(self) -> str:
        return f"{format_number(self.start)}-{format_number(self.end)}"


@dataclass(frozen=True)
class Text(Value):
    text: str

    def is_text(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.text


def _shift(r: Range, n: Number) -> Range:
    return Range(r.start + n.value, r.end + n.value)


def _map_value(value: Value, f: Callable[[float], float]) -> Value:
    if isinstance(value, Number):
        return Number(f(value.value))
    if isinstance(value, Range):
        return Range(f(value.start), f(value.end))
    return value


def _first_number(values: tuple[Value, ...]) -> float:
    for value in values:
        if isinstance(value, Number):
            return value.value
        if isinstance(value, Range):
            return value.start
    return 0.0


class ScalableValue:
    """A value that depends on the servings the recipe is scaled to."""

    def values(self) -> tuple[Value, ...]:
        raise NotImplementedError


@dataclass(frozen=True)
class Linear(ScalableValue):
    """Scaled proportionally to the servings."""

    value: Value

    def values(self) -> tuple[Value, ...]:
        return (self.value,)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ByServings(ScalableValue):
    """One explicit value per serving count, in the recipe's servings order."""

    tiers: tuple[Value, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiers", tuple(self.tiers))
        if not self.tiers:
            raise ValueError("ByServings needs at least one value")

    def values(self) -> tuple[Value, ...]:
        return self.tiers

    def __str__(self) -> str:
        return "|".join(str(v) for v in self.tiers)


class QuantityValue:
    """The amount of a quantity: fixed, or scalable with the servings."""

    @staticmethod
    def from_ast(node: QuantityNode) -> QuantityValue:
        """Build a quantity value from a parsed quantity node."""
        from .ast import ManyValues, SingleValue

        if isinstance(node, ManyValues):
            return Scalable(ByServings(tuple(node.values)))
        if isinstance(node, SingleValue):
            if node.auto_scale:
                return Scalable(Linear(node.value))
            return Fixed(node.value)
        raise TypeError(f"Not a quantity node: {node!r}")

    def values(self) -> tuple[Value, ...]:
        raise NotImplementedError

    def contains_text_value(self) -> bool:
        return any(v.is_text() for v in self.values())

    def first_number(self) -> float:
        """First numeric magnitude found, 0 if there is none."""
        return _first_number(self.values())

    def map_numbers(self, f: Callable[[float], float]) -> QuantityValue:
        """Apply ``f`` to every number, keeping the shape of the value."""
        raise NotImplementedError

    def extract_value(self) -> Value:
        """
        Get the single value of a fixed quantity value.

        Raises:
            NotScaled: If the value is scalable
        """
        raise NotImplementedError

    def try_add(self, other: QuantityValue) -> QuantityValue:
        """
        Add two fixed quantity values.

        Raises:
            NotScaled: If any of them is scalable
            TextValueError: If any of them is text
        """
        value = self.extract_value().try_add(other.extract_value())
        return Fixed(value)


@dataclass(frozen=True)
class Fixed(QuantityValue):
    value: Value

    def values(self) -> tuple[Value, ...]:
        return (self.value,)

    def map_numbers(self, f: Callable[[float], float]) -> QuantityValue:
        return Fixed(_map_value(self.value, f))

    def extract_value(self) -> Value:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Scalable(QuantityValue):
    value: ScalableValue

    def values(self) -> tuple[Value, ...]:
        return self.value.values()

    def map_numbers(self, f: Callable[[float], float]) -> QuantityValue:
        if isinstance(self.value, Linear):
            return Scalable(Linear(_map_value(self.value.value, f)))
        return Scalable(ByServings(tuple(_map_value(v, f) for v in self.value.values())))

    def extract_value(self) -> Value:
        raise NotScaled(self.value)

    def __str__(self) -> str:
        return str(self.value)


# ============================================================================
# Units
# ============================================================================


@dataclass(frozen=True)
class UnitInfo:
    """Resolution of a unit text: a known unit, or unknown when ``unit`` is None."""

    unit: Unit | None = None

    @property
    def is_known(self) -> bool:
        return self.unit is not None

    @classmethod
    def resolve(cls, text: str, converter: Converter) -> UnitInfo:
        try:
            return cls(converter.get_unit(text))
        except UnknownUnitError:
            return cls(None)


class QuantityUnit:
    """
    Unit text of a quantity, resolved against a converter at most once.

    Resolution is lazy: quantities are usually built while parsing, before a
    converter is around. The first ``unit_or_parse`` call stores the result
    and every later call, from any thread, returns that same result.

    Two units are equal when their texts are equal.
    """

    def __init__(self, text: str, info: UnitInfo | None = None):
        self.text = text
        self._info = info
        self._lock = threading.Lock()

    @property
    def info(self) -> UnitInfo | None:
        """The resolved info, or None if not resolved yet."""
        return self._info

    def unit_or_parse(self, converter: Converter) -> UnitInfo:
        info = self._info
        if info is not None:
            return info
        with self._lock:
            if self._info is None:
                self._info = UnitInfo.resolve(self.text, converter)
            return self._info

    def copy(self) -> QuantityUnit:
        return QuantityUnit(self.text, self._info)

    # Locks can't be copied or pickled, every copy gets its own
    def __getstate__(self) -> dict:
        return {"text": self.text, "info": self._info}

    def __setstate__(self, state: dict) -> None:
        self.text = state["text"]
        self._info = state["info"]
        self._lock = threading.Lock()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantityUnit):
            return NotImplemented
        return self.text == other.text

    def __hash__(self) -> int:
        return hash(self.text)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"QuantityUnit({self.text!r}, info={self._info!r})"


# ============================================================================
# Quantity
# ============================================================================


@dataclass
class Quantity:
    """A quantity value with an optional unit. No unit means dimensionless."""

    value: QuantityValue
    unit: QuantityUnit | str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.unit, str):
            self.unit = QuantityUnit(self.unit)

    @classmethod
    def new_and_parse(
        cls, value: QuantityValue, unit: str | None, converter: Converter
    ) -> Quantity:
        """Create a quantity resolving its unit right away."""
        if unit is None:
            return cls(value)
        return cls(value, QuantityUnit(unit, UnitInfo.resolve(unit, converter)))

    @classmethod
    def with_known_unit(cls, value: QuantityValue, unit_text: str, unit: Unit | None) -> Quantity:
        """Create a quantity whose unit resolution is already known."""
        return cls(value, QuantityUnit(unit_text, UnitInfo(unit)))

    @classmethod
    def unitless(cls, value: QuantityValue) -> Quantity:
        return cls(value)

    @property
    def unit_text(self) -> str | None:
        return self.unit.text if self.unit is not None else None

    @property
    def unit_info(self) -> UnitInfo | None:
        """Resolved unit info, None when unitless or not resolved yet."""
        return self.unit.info if self.unit is not None else None

    def is_compatible(self, other: Quantity, converter: Converter) -> Unit | None:
        """
        Check if two quantities can be added together.

        Args:
            other: The right hand quantity
            converter: Used to resolve the units that are not resolved yet

        Returns:
            The common unit to convert to (this quantity's unit) when both
            units are known, None if no conversion is needed

        Raises:
            MissingUnit: If only one of the quantities has a unit
            DifferentPhysicalQuantities: If the known units measure different things
            UnknownDifferentUnits: If a unit is unknown and the texts differ
        """
        if self.unit is None and other.unit is None:
            return None
        if self.unit is None:
            raise MissingUnit(other.unit.copy(), "right")
        if other.unit is None:
            raise MissingUnit(self.unit.copy(), "left")

        a_info = self.unit.unit_or_parse(converter)
        b_info = other.unit.unit_or_parse(converter)

        if a_info.unit is not None and b_info.unit is not None:
            if a_info.unit.physical_quantity != b_info.unit.physical_quantity:
                raise DifferentPhysicalQuantities(
                    a_info.unit.physical_quantity, b_info.unit.physical_quantity
                )
            return a_info.unit

        # Unknown units only match by their text
        if self.unit.text != other.unit.text:
            raise UnknownDifferentUnits(self.unit.text, other.unit.text)
        return None

    def try_add(self, other: Quantity, converter: Converter) -> Quantity:
        """
        Add two quantities. The result keeps this quantity's unit.

        All failures are ``QuantityAddError`` subclasses.

        Raises:
            IncompatibleUnits: If the units can't be combined
            AddConvertError: If the converter fails to convert ``other``
            NotScaled: If any of the values is scalable
            TextValueError: If any of the values is text
        """
        common = self.is_compatible(other, converter)

        if common is not None:
            try:
                rhs = converter.convert(other, common)
            except ConvertError as e:
                raise AddConvertError(e) from e
        else:
            rhs = other

        value = self.value.try_add(rhs.value)
        return Quantity(value, self.unit.copy() if self.unit is not None else None)

    def fit(self, converter: Converter) -> None:
        """
        Convert in place to the best fitting unit of the same unit system.

        Unitless quantities, unknown units and text values are left untouched.
        """
        if self.unit is None or not self.unit.unit_or_parse(converter).is_known:
            return
        if self.value.contains_text_value():
            return

        try:
            fitted = converter.convert(self, ConvertTo.SAME_SYSTEM)
        except ConvertError as e:
            raise RuntimeError(f"Failed to fit known unit '{self.unit}': {e}") from e
        self.value = fitted.value
        self.unit = fitted.unit

    def __str__(self) -> str:
        if self.unit is None:
            return str(self.value)
        return f"{self.value} {self.unit}"
