import threading
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ConcurrentCache(Generic[K, V]):
    """
    Get-or-compute memo safe for concurrent readers and writers.

    The factory runs outside the lock, so two threads may compute the same
    key at once. Only the first result is stored and every caller gets
    that stored value back; later computations are discarded.
    """

    def __init__(self) -> None:
        self._items: dict[K, V] = {}
        self._lock = threading.Lock()

    def get_or_add(self, key: K, factory: Callable[[K], V]) -> V:
        try:
            return self._items[key]
        except KeyError:
            pass
        except TypeError:
            # unhashable key (e.g. Annotated with dict metadata), not memoized
            return factory(key)

        value = factory(key)

        with self._lock:
            return self._items.setdefault(key, value)

    def get(self, key: K) -> V | None:
        return self._items.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
