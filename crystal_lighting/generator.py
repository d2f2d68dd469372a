"""Procedural puzzle instances."""

from __future__ import annotations

import random

from .model import Costs, PuzzleInstance


MIN_SIZE, MAX_SIZE = 10, 100
LANTERN_COST_RANGE = (1, 10)
MIRROR_COST_RANGE = (3, 30)
OBSTACLE_COST_RANGE = (2, 20)

# Seeds with fixed board sizes, handy for quick manual checks.
FIXED_SIZES = {
    1: MIN_SIZE,
    2: (MIN_SIZE + MAX_SIZE) // 2,
    3: MAX_SIZE,
}


def generate(seed: int) -> PuzzleInstance:
    rng = random.Random(seed)
    height = rng.randint(MIN_SIZE, MAX_SIZE)
    width = rng.randint(MIN_SIZE, MAX_SIZE)
    if seed in FIXED_SIZES:
        height = width = FIXED_SIZES[seed]

    obstacle_probability = rng.randint(5, 15)
    crystal_probability = rng.randint(15, 25)

    rows = []
    crystals = 0
    for _ in range(height):
        row = []
        for _ in range(width):
            roll = rng.randrange(100)
            if roll < crystal_probability:
                row.append(str(rng.randint(1, 6)))
                crystals += 1
            elif roll < crystal_probability + obstacle_probability:
                row.append("X")
            else:
                row.append(".")
        rows.append("".join(row))

    costs = Costs(
        lantern=rng.randint(*LANTERN_COST_RANGE),
        mirror=rng.randint(*MIRROR_COST_RANGE),
        obstacle=rng.randint(*OBSTACLE_COST_RANGE),
    )
    max_mirrors = rng.randint(0, crystals // 8)
    max_obstacles = rng.randint(0, crystals // 16)
    if seed == 1:
        max_mirrors = max_obstacles = 3

    return PuzzleInstance(
        rows=rows,
        costs=costs,
        max_mirrors=max_mirrors,
        max_obstacles=max_obstacles,
        seed=seed,
        crystal_probability=crystal_probability,
        obstacle_probability=obstacle_probability,
    )


__all__ = ["generate"]
