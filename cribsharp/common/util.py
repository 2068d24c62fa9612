from itertools import combinations
from typing import Iterator, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def all_subsets(
    items: Sequence[T], min_size: int = 1, max_size: Optional[int] = None
) -> Iterator[Tuple[T, ...]]:
    """
    Yield every subset of ``items`` whose size lies in [min_size, max_size].

    Subsets come out smallest first, each in the order of ``items``. For the
    at most five cards of a counted hand this is 31 subsets.

    :param items: The items to draw subsets from
    :param min_size: Smallest subset size to yield (at least 1)
    :param max_size: Largest subset size to yield, defaults to ``len(items)``
    :return: An iterator of tuples
    """
    upper = len(items) if max_size is None else min(max_size, len(items))
    for size in range(max(min_size, 1), upper + 1):
        yield from combinations(items, size)


def is_consecutive(values: List[int]) -> bool:
    """
    Check whether the values, once sorted, step up by exactly one.

    Duplicates break a run, so ``[3, 4, 4]`` is not consecutive.

    :param values: Integers to check
    :return: True for an unbroken ascending sequence
    """
    ordered = sorted(values)
    return all(b - a == 1 for a, b in zip(ordered, ordered[1:]))


def calculate_chi_square(
    observed_values: List[float], expected_values: List[float]
) -> float:
    """
    Calculate the chi-square statistic given lists of observed and expected values.

    :param observed_values: A list of observed values
    :param expected_values: A list of expected values
    :return: The calculated chi-square statistic
    :raises ValueError: If the lists do not have the same length
    """
    if len(observed_values) != len(expected_values):
        raise ValueError("Observed and expected value lists must have the same length.")

    return sum((o - e) ** 2 / e for o, e in zip(observed_values, expected_values))
