"""Seedable linear congruential generator used by the procedural layers."""

from __future__ import annotations

from typing import Iterator

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
_MODULUS_MASK = 0xFFFFFFFF
_OUTPUT_MASK = 0x00FFFFFF
_OUTPUT_SCALE = 0x01000000


class SeededStream:
    """Reproducible stream of uniform floats in ``[0, 1)``.

    The seed is reduced to an unsigned 32-bit value; a zero state would make
    the generator degenerate, so it is replaced by 1. A stream can only be
    restarted by constructing a new one with the same seed.
    """

    __slots__ = ("seed", "_state")

    def __init__(self, seed: int) -> None:
        state = int(seed) & _MODULUS_MASK
        self.seed = state or 1
        self._state = self.seed

    def next(self) -> float:
        self._state = (LCG_MULTIPLIER * self._state + LCG_INCREMENT) & _MODULUS_MASK
        return (self._state & _OUTPUT_MASK) / _OUTPUT_SCALE

    __call__ = next

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        return self.next()


def new_stream(seed: int) -> SeededStream:
    """Create a fresh stream for ``seed``."""
    return SeededStream(seed)


__all__ = ["SeededStream", "new_stream"]
