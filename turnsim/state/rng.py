"""
XorShift128 RNG - the single random source of a simulation.

Every simulation owns exactly one Random instance. Nothing in the engine
reaches for the `random` module, so two runs with the same seed consume the
same stream in the same order and produce bit-identical results.

Seeds may be given as ints or as short strings ("ABC123"); strings are
folded to an int with a base-35 alphabet so they stay easy to type on a
command line.
"""

from __future__ import annotations

from typing import List, MutableSequence, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

_MASK64 = 0xFFFFFFFFFFFFFFFF
_SEED_CHARACTERS = "0123456789ABCDEFGHIJKLMNPQRSTUVWXYZ"


class XorShift128:
    """
    XorShift128 PRNG.

    State is two 64-bit integers (seed0, seed1).
    """

    def __init__(self, seed: int, seed1: Optional[int] = None):
        """
        Initialize with a 64-bit seed or explicit (seed0, seed1) state.

        Args:
            seed: Either the initial seed (if seed1 is None) or seed0 state
            seed1: If provided, use (seed, seed1) as direct state values
        """
        if seed1 is not None:
            # Two-argument form: set state directly (used by copy())
            self.seed0 = seed & _MASK64
            self.seed1 = seed1 & _MASK64
        else:
            # A zero state would never leave zero
            if seed == 0:
                seed = -0x8000000000000000
            self.seed0 = self._murmur_hash3(seed)
            self.seed1 = self._murmur_hash3(self.seed0)

    @staticmethod
    def _murmur_hash3(x: int) -> int:
        """MurmurHash3 finalizer - used for seed initialization."""
        x = x & _MASK64
        x ^= x >> 33
        x = (x * 0xff51afd7ed558ccd) & _MASK64
        x ^= x >> 33
        x = (x * 0xc4ceb9fe1a85ec53) & _MASK64
        x ^= x >> 33
        return x

    def _next_long(self) -> int:
        """Generate next signed 64-bit value."""
        s1 = self.seed0
        s0 = self.seed1
        self.seed0 = s0

        s1 ^= (s1 << 23) & _MASK64
        self.seed1 = (s1 ^ s0 ^ (s1 >> 17) ^ (s0 >> 26)) & _MASK64

        result = (self.seed0 + self.seed1) & _MASK64
        if result >= 0x8000000000000000:
            result -= 0x10000000000000000
        return result

    def next_int(self, bound: int) -> int:
        """Random int in [0, bound), rejection-sampled to avoid modulo bias."""
        if bound <= 0:
            raise ValueError("bound must be positive")

        while True:
            bits = (self._next_long() & _MASK64) >> 1
            val = bits % bound
            if bits - val + (bound - 1) >= 0:
                return int(val)

    def next_double(self) -> float:
        """Random double in [0, 1) with 53 bits of precision."""
        return ((self._next_long() & _MASK64) >> 11) / (1 << 53)

    def copy(self) -> XorShift128:
        return XorShift128(self.seed0, self.seed1)


class Random:
    """
    Counting wrapper around XorShift128.

    `counter` records how many values have been drawn, which makes it easy
    to assert that two runs consumed the stream identically.
    """

    def __init__(self, seed: Union[int, str], counter: int = 0):
        """
        Args:
            seed: int seed or seed string
            counter: number of draws to skip before use
        """
        if isinstance(seed, str):
            seed = seed_to_long(seed)
        self.seed = seed
        self._rng = XorShift128(seed)
        self.counter = 0

        for _ in range(counter):
            self.random_int(999)

    def random_int(self, range_val: int) -> int:
        """Random int in [0, range_val] INCLUSIVE."""
        self.counter += 1
        return self._rng.next_int(range_val + 1)

    def random_int_range(self, start: int, end: int) -> int:
        """Random int in [start, end] INCLUSIVE."""
        self.counter += 1
        return start + self._rng.next_int(end - start + 1)

    def random_float(self) -> float:
        """Random float in [0, 1)."""
        self.counter += 1
        return self._rng.next_double()

    def random_boolean_chance(self, chance: float) -> bool:
        """True with probability `chance`; chances outside [0, 1] never draw."""
        if chance <= 0:
            return False
        if chance >= 1:
            return True
        self.counter += 1
        return self._rng.next_double() < chance

    def choice(self, values: Sequence[T]) -> T:
        """Deterministic choice from a non-empty sequence."""
        if not values:
            raise ValueError("Cannot choose from empty sequence")
        return values[self.random_int(len(values) - 1)]

    def shuffle(self, values: MutableSequence[T]) -> None:
        """Fisher-Yates shuffle in place."""
        for i in range(len(values) - 1, 0, -1):
            j = self.random_int(i)
            values[i], values[j] = values[j], values[i]

    def sample(self, values: Sequence[T], k: int) -> List[T]:
        pool = list(values)
        self.shuffle(pool)
        return pool[:k]

    def copy(self) -> Random:
        new = Random.__new__(Random)
        new.seed = self.seed
        new._rng = self._rng.copy()
        new.counter = self.counter
        return new


def seed_to_long(seed_string: str) -> int:
    """
    Convert a seed string (e.g., "ABC123") to an int.

    Pure numeric strings (including negative) are parsed as plain ints.
    Otherwise base-35 over 0-9A-Z without O; O is read as 0.
    """
    if seed_string.lstrip('-').isdigit():
        return int(seed_string)

    seed_string = seed_string.upper().replace("O", "0")

    result = 0
    for char in seed_string:
        remainder = _SEED_CHARACTERS.find(char)
        if remainder == -1:
            continue
        result *= len(_SEED_CHARACTERS)
        result += remainder

    return result


def long_to_seed(seed_long: int) -> str:
    """Inverse of seed_to_long for non-negative values."""
    if seed_long == 0:
        return "0"

    leftover = seed_long & _MASK64
    result = []
    while leftover != 0:
        remainder = leftover % len(_SEED_CHARACTERS)
        leftover = leftover // len(_SEED_CHARACTERS)
        result.append(_SEED_CHARACTERS[remainder])

    return ''.join(reversed(result))


__all__ = ["XorShift128", "Random", "seed_to_long", "long_to_seed"]
