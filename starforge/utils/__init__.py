"""Utility functions and constants for starforge."""

from .rng import SeededRNG, hash_seed
from .tables import random_from_range, to_roman, weighted_choice

__all__ = [
    "SeededRNG",
    "hash_seed",
    "random_from_range",
    "to_roman",
    "weighted_choice",
]
