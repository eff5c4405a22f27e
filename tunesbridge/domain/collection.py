from __future__ import annotations

from typing import Any, Callable, Generic, Iterable, Iterator, Tuple, TypeVar, overload

from .ports import Backend


T = TypeVar("T")


class ItemCollection(Generic[T]):
    """Ordered, immutable snapshot of entities built from one native sequence.

    The native sequence is read exactly once, at construction; later changes
    inside the host application are not observed.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: Tuple[T, ...] = tuple(items)

    @classmethod
    def wrap(
        cls,
        natives: Iterable[Any],
        backend: Backend,
        factory: Callable[[Any, Backend], T],
    ) -> "ItemCollection[T]":
        """Wrap each native handle with ``factory``, preserving native order."""
        return cls(factory(native, backend) for native in natives)

    @property
    def count(self) -> int:
        """Number of entities, as the COM collection interfaces report it."""
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> "ItemCollection[T]": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ItemCollection(self._items[index])
        return self._items[index]

    def __repr__(self) -> str:
        return f"ItemCollection(count={len(self._items)})"
