from typing import Any, Callable, Iterable

from msgmapper.core.models.markers import MARKERS, is_marker


def is_marked_message(tp: Any) -> bool:
    """Default convention: any class deriving from IMessage, ICommand or IEvent."""
    if not isinstance(tp, type) or is_marker(tp):
        return False
    return any(marker in tp.__mro__ for marker in MARKERS)


class Conventions:
    """
    Decides which of the scanned types are messages.

    Hosts that do not want to derive from the marker protocols pass their
    own predicate, e.g. a namespace rule.
    """

    def __init__(self, is_message_type: Callable[[Any], bool] | None = None) -> None:
        self._is_message_type = is_message_type or is_marked_message

    def is_message_type(self, tp: Any) -> bool:
        return self._is_message_type(tp)

    def message_types(self, types: Iterable[Any]) -> list[Any]:
        return [tp for tp in types if self.is_message_type(tp)]
