"""Descending uniform order statistics drawn one at a time."""

from __future__ import annotations

import numpy as np


class OrderStatisticKeys:
    """Generate the largest values of ``n`` uniform(0, 1) draws, largest first.

    The maximum of ``n`` independent uniform draws is distributed as
    ``U ** (1 / n)``.  Conditioned on that maximum ``c``, the remaining
    ``n - 1`` draws are uniform on ``[0, c)``, so the next value is
    ``c * U ** (1 / (n - 1))`` and so on.  Producing ``m`` keys therefore costs
    ``m`` draws instead of ``n``.

    Attributes:
        population: Number of draws ``n`` the keys are order statistics of.
        ceiling: Most recently produced key, ``1.0`` before the first draw.
        n_drawn: Number of keys produced so far.
    """

    def __init__(self, population: int, seed: int | np.random.Generator | None = None) -> None:
        """Initialize the generator.

        Args:
            population: Total number of uniform draws being simulated.
            seed: Random seed, or a generator to share with the caller.
        """
        if population <= 0:
            raise ValueError("population must be positive")
        self.population = int(population)
        self._rng = np.random.default_rng(seed)
        self.ceiling = 1.0
        self.n_drawn = 0

    def next_key(self) -> float:
        """Return the next (strictly smaller) order statistic."""
        remaining = self.population - self.n_drawn
        if remaining <= 0:
            raise ValueError(f"cannot draw more than {self.population} order statistics")
        self.ceiling *= float(self._rng.random()) ** (1.0 / remaining)
        self.n_drawn += 1
        return self.ceiling

    def reset(self) -> None:
        """Start a fresh sequence for a new sampling operation."""
        self.ceiling = 1.0
        self.n_drawn = 0

    def __iter__(self) -> OrderStatisticKeys:
        return self

    def __next__(self) -> float:
        if self.n_drawn >= self.population:
            raise StopIteration
        return self.next_key()
