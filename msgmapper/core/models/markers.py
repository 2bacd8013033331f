from typing import Protocol


class IMessage(Protocol):
    """
    Marker for message contracts.

    Message interfaces derive from one of the markers and declare only
    properties. The default conventions treat every subclass of a marker
    as a message type.
    """


class ICommand(IMessage, Protocol):
    """Marker for messages that request an action from a single endpoint."""


class IEvent(IMessage, Protocol):
    """Marker for messages announcing something that already happened."""


MARKERS: tuple[type, ...] = (IMessage, ICommand, IEvent)


def is_marker(tp: object) -> bool:
    return any(tp is marker for marker in MARKERS)
