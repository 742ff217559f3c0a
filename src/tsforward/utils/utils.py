from typing import Dict, Iterator, List, Mapping, Sequence, TypeVar

T = TypeVar("T")


def merge_labels(*label_sets: Mapping[str, str]) -> Dict[str, str]:
    """Merge label sets left to right; later sets win on key collision"""
    merged: Dict[str, str] = {}
    for labels in label_sets:
        merged.update(labels)
    return merged


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])
