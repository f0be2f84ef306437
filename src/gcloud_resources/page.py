"""Pages of list results with caller-driven continuation."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Generic, TypeVar, overload

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a list operation.

    Items keep the order the server returned them in. ``next_token`` is
    present only when more pages exist; pass it back as ``page_token`` to
    fetch the next page. Nothing is fetched automatically.
    """

    items: list[T] = field(default_factory=list)
    next_token: str | None = None
    total: int | None = None

    @property
    def has_next(self) -> bool:
        """True when another page can be requested."""
        return self.next_token is not None

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> list[T]: ...

    def __getitem__(self, index: int | slice) -> T | list[T]:
        return self.items[index]

    def __bool__(self) -> bool:
        return bool(self.items)


def parse_total(value: object) -> int | None:
    """Total counts arrive as JSON numbers or int64 strings."""
    if value is None:
        return None
    return int(value)  # type: ignore[call-overload]
