"""Rating aggregates shared by every surface that reports an average."""

from typing import Iterable

from ratemystore.model.rating import MAX_RATING, MIN_RATING


def average_rating(values: Iterable[int]) -> float:
    """Mean of the values rounded half-up to one decimal; 0 when empty.

    Computed in integers: floor(total * 10 / count + 0.5), so 4.25 becomes
    4.3 rather than the 4.2 that round() would give.
    """
    values = list(values)
    if not values:
        return 0
    count = len(values)
    tenths = (sum(values) * 20 + count) // (2 * count)
    return tenths / 10


def rating_distribution(values: Iterable[int]) -> dict[int, int]:
    distribution = {star: 0 for star in range(MAX_RATING, MIN_RATING - 1, -1)}
    for value in values:
        distribution[value] += 1
    return distribution
