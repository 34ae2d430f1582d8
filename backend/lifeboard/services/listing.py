"""Search, filter and ordering of idea and subscription lists."""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from lifeboard.schemas.listing import ALL, ListQuery
from lifeboard.services.costs import parse_cost

T = TypeVar("T")


def _label(item: Any) -> str | None:
    return getattr(item, "title", None) or getattr(item, "name", None)


def matches(item: Any, query: ListQuery) -> bool:
    term = (query.search or "").casefold()
    if term:
        label = _label(item)
        description = getattr(item, "description", None)
        found = (label is not None and term in label.casefold()) or (
            description is not None and term in description.casefold()
        )
        if not found:
            return False
    if query.status != ALL and getattr(item, "status", None) != query.status:
        return False
    if query.category != ALL and getattr(item, "category", None) != query.category:
        return False
    return True


# sort key -> (value getter, descending)
SORT_KEYS: dict[str, tuple[Callable[[Any], Any], bool]] = {
    "newest": (lambda i: getattr(i, "created_at", None), True),
    "oldest": (lambda i: getattr(i, "created_at", None), False),
    "name": (lambda i: _label(i).casefold() if _label(i) else None, False),
    "title": (lambda i: _label(i).casefold() if _label(i) else None, False),
    "cost-high": (lambda i: parse_cost(i.cost) if hasattr(i, "cost") else None, True),
    "cost-low": (lambda i: parse_cost(i.cost) if hasattr(i, "cost") else None, False),
    "renewal": (lambda i: getattr(i, "renewal_date", None), False),
}


def sort_items(items: Sequence[T], sort: str) -> list[T]:
    """Stable sort; items without a value for the key keep their order at the end."""
    if sort not in SORT_KEYS:
        return list(items)
    getter, descending = SORT_KEYS[sort]
    keyed = [(getter(item), item) for item in items]
    present = [pair for pair in keyed if pair[0] is not None]
    missing = [item for value, item in keyed if value is None]
    # reverse=True keeps equal keys in input order
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [item for _, item in present] + missing


def filter_and_sort(items: Sequence[T], query: ListQuery) -> list[T]:
    return sort_items([item for item in items if matches(item, query)], query.sort)
