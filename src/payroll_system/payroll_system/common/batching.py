from __future__ import annotations

from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Fixed-size slices, applied in order by the caller."""
    step = max(int(size), 1)
    for i in range(0, len(items), step):
        yield items[i : i + step]
