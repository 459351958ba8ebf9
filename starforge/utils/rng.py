"""Seedable RNG for deterministic system generation."""

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply on unsigned operands."""
    return (a * b) & _MASK32


def hash_seed(seed: str) -> int:
    """Hash a string seed into an unsigned 32-bit state.

    Args:
        seed: Arbitrary text seed

    Returns:
        Unsigned 32-bit integer state
    """
    h = (1779033703 ^ len(seed)) & _MASK32
    for char in seed:
        h = _imul(h ^ ord(char), 3432918353)
        h = ((h << 13) | (h >> 19)) & _MASK32
    return h


class SeededRNG:
    """Mulberry32 pseudo-random source seeded from a string.

    All randomness in generation and editing goes through this class so that
    the same seed always reproduces the same system. There is no fallback to
    global or time-based entropy.
    """

    def __init__(self, seed: str):
        """Initialize RNG with given seed.

        Args:
            seed: Text seed for deterministic randomness
        """
        self.seed = seed
        self.state = hash_seed(seed)

    def next_float(self) -> float:
        """Return random float in [0.0, 1.0).

        Returns:
            Random float between 0.0 and 1.0
        """
        self.state = (self.state + 0x6D2B79F5) & _MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    def next_int(self, low: int, high: int) -> int:
        """Return random integer in range [low, high], inclusive.

        Args:
            low: Lower bound (inclusive)
            high: Upper bound (inclusive)

        Returns:
            Random integer between low and high
        """
        return int(self.next_float() * (high - low + 1)) + low

    def uniform(self, low: float, high: float) -> float:
        """Return random float in [low, high).

        Args:
            low: Lower bound
            high: Upper bound

        Returns:
            Random float between low and high
        """
        return self.next_float() * (high - low) + low

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self.next_float() < probability

    def shuffle(self, seq: list) -> None:
        """Shuffle list in place (Fisher-Yates).

        Args:
            seq: List to shuffle
        """
        for i in range(len(seq) - 1, 0, -1):
            j = self.next_int(0, i)
            seq[i], seq[j] = seq[j], seq[i]

    def get_state(self) -> int:
        """Get the current state of the RNG for serialization.

        Returns:
            Internal 32-bit state that can be used with set_state
        """
        return self.state

    def set_state(self, state: int) -> None:
        """Set the state of the RNG for deserialization.

        Args:
            state: Internal state from get_state
        """
        self.state = state & _MASK32
