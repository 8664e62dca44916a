from bisect import bisect_left
from operator import attrgetter
from typing import Any, Callable

from chartkit.records import Dataset, Record

by_key = attrgetter("key")


def nearest(dataset: Dataset, pointer_key: Any, key: Callable[[Record], Any] = by_key) -> Record:
    """
    Record whose key is closest to pointer_key, by bisection. O(log n).

    The dataset must be sorted ascending by `key`. The insertion point is
    searched over all but the last element, which clamps keys past either end
    to the first/last record. The left neighbour wins only when it is strictly
    closer, so a pointer exactly between two keys resolves to the upper one.
    """
    n = len(dataset)
    if n == 0:
        raise ValueError("nearest() on an empty dataset")
    if n == 1:
        return dataset[0]

    i = bisect_left(dataset, pointer_key, 0, n - 1, key=key)
    if i > 0 and pointer_key - key(dataset[i - 1]) < key(dataset[i]) - pointer_key:
        i -= 1
    return dataset[i]
