from dataclasses import replace
from typing import Optional, Protocol, Sequence, TypeVar


class OrderedItem(Protocol):
    id: str
    sort_order: int


T = TypeVar("T", bound=OrderedItem)


def sort_items(items: Sequence[T]) -> list[T]:
    # sorted 는 안정 정렬이므로 sort_order 가 같으면 기존(created_at) 순서를 유지한다.
    return sorted(items, key=lambda item: item.sort_order)


def renumber(items: Sequence[T]) -> list[T]:
    """Reassign every item's sort_order to its index: the dense sequence 0..n-1."""
    return [replace(item, sort_order=index) for index, item in enumerate(items)]


def reorder(items: Sequence[T], source_id: str, target_id: str) -> Optional[list[T]]:
    """
    source 를 꺼내 target 의 위치에 끼워 넣고 전체 sort_order 를 다시 매긴다.
    같은 항목이거나 둘 중 하나가 목록에 없으면 None (변경 없음).
    """
    if source_id == target_id:
        return None
    current = sort_items(items)
    ids = [item.id for item in current]
    if source_id not in ids or target_id not in ids:
        return None

    from_index = ids.index(source_id)
    to_index = ids.index(target_id)
    moved = current.pop(from_index)
    current.insert(to_index, moved)
    return renumber(current)


def next_sort_order(items: Sequence[OrderedItem]) -> int:
    return max((item.sort_order for item in items), default=-1) + 1
