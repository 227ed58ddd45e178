from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")

def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yields consecutive slices of `size` items; the last slice may be shorter."""
    if size <= 0:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])

def batch_count(total: int, size: int) -> int:
    return -(-total // size) if total else 0
