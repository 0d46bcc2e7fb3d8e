"""Priority-proportional random pick of one interest."""

import random

from ..models import Interest

_rng = random.Random()


def pick_interest(interests: list[Interest], rng: random.Random | None = None) -> Interest:
    """Pick one interest with probability priority / sum(priorities).

    Walks the list accumulating weights and returns the first interest whose
    running total exceeds a uniform draw in [0, total). Non-positive
    priorities carry no weight.
    """
    rng = rng or _rng
    weights = [max(i.priority, 0) for i in interests]
    total = sum(weights)
    if total <= 0:
        raise ValueError("pick_interest needs at least one interest with positive priority")

    r = rng.randrange(total)
    running = 0
    for interest, weight in zip(interests, weights):
        running += weight
        if r < running:
            return interest
    # Unreachable while r < total
    return interests[-1]
