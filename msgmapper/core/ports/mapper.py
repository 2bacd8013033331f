from typing import Any, Callable, Iterable, Protocol


class MessageMapperPort(Protocol):
    """
    What a message serializer needs from the type-identity layer.

    The serializer never builds message classes itself. It asks the mapper
    which concrete shape to write for an interface, which type a payload
    tag stands for, and how to obtain an empty instance to populate.

    Implementations must be:
    - initialized exactly once, before the first message is handled
    - safe for concurrent use afterwards
    """

    def initialize(self, message_types: Iterable[Any] | None) -> None:
        """Discover the closure of `message_types` and synthesize proxies."""

    def create_instance(self, tp: Any, action: Callable[[Any], None] | None = None) -> Any:
        """Return a new instance of `tp`, or of its mapped concrete type."""

    def get_mapped_type_for(self, tp_or_name: Any) -> Any | None:
        """
        Interface -> concrete type, concrete type -> interface, or type tag
        -> type. Returns None when nothing matches.
        """

    def type_name(self, tp: Any) -> str:
        """Return the tag a serializer should write for `tp`."""
