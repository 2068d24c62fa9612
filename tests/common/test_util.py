import pytest

from cribsharp.common.util import all_subsets, calculate_chi_square, is_consecutive


def test_all_subsets_counts():
    assert len(list(all_subsets([1, 2, 3, 4, 5]))) == 31
    assert len(list(all_subsets([1, 2, 3, 4, 5], min_size=2))) == 26


def test_all_subsets_size_window():
    subsets = list(all_subsets("abcd", min_size=3, max_size=3))
    assert subsets == [
        ("a", "b", "c"),
        ("a", "b", "d"),
        ("a", "c", "d"),
        ("b", "c", "d"),
    ]


def test_all_subsets_smallest_first():
    sizes = [len(s) for s in all_subsets([1, 2, 3])]
    assert sizes == sorted(sizes)


@pytest.mark.parametrize(
    "values,expected",
    [
        ([3, 4, 5], True),
        ([5, 3, 4], True),
        ([1, 2, 3, 4, 5], True),
        ([3, 4, 4], False),
        ([3, 5, 6], False),
        ([7], True),
    ],
)
def test_is_consecutive(values, expected):
    assert is_consecutive(values) is expected


def test_calculate_chi_square():
    assert calculate_chi_square([10, 10], [10, 10]) == 0
    assert calculate_chi_square([12, 8], [10, 10]) == pytest.approx(0.8)


def test_calculate_chi_square_length_mismatch():
    with pytest.raises(ValueError):
        calculate_chi_square([1, 2], [1])
