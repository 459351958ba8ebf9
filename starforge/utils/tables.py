"""Helpers for rulepack weighted tables and numeric ranges."""

from typing import Any

from .rng import SeededRNG

_ROMAN_NUMERALS = [
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
]


def weighted_choice(rng: SeededRNG, entries: list) -> Any:
    """Pick a value from a weighted table.

    Entries may be pydantic ``WeightedEntry`` objects or plain dicts with
    ``weight`` and ``value`` keys. The last entry is returned if floating
    point rounding walks past the end of the table.

    Args:
        rng: Random source
        entries: Non-empty list of weighted entries

    Returns:
        The chosen entry's value

    Raises:
        ValueError: If the table is empty
    """
    if not entries:
        raise ValueError("Cannot choose from an empty weighted table")

    def weight_of(entry) -> float:
        return entry["weight"] if isinstance(entry, dict) else entry.weight

    def value_of(entry):
        return entry["value"] if isinstance(entry, dict) else entry.value

    total = sum(weight_of(entry) for entry in entries)
    roll = rng.next_float() * total
    for entry in entries:
        roll -= weight_of(entry)
        if roll < 0:
            return value_of(entry)
    return value_of(entries[-1])


def random_from_range(rng: SeededRNG, low: float, high: float) -> float:
    """Draw a float uniformly from [low, high)."""
    return rng.uniform(low, high)


def to_roman(number: int) -> str:
    """Convert a positive integer to a Roman numeral.

    Args:
        number: Integer >= 1

    Returns:
        Roman numeral string ("" for numbers below 1)
    """
    result = ""
    for value, numeral in _ROMAN_NUMERALS:
        while number >= value:
            result += numeral
            number -= value
    return result
