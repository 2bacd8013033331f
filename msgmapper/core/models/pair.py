from dataclasses import dataclass
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class KeyValuePair(Generic[K, V]):
    """
    Two-slot key/value shape.

    Bound pairs get a structural canonical name qualified with the
    mapper's key/value namespace, e.g. `msgmapper.KeyValuePairOfstrAndint`,
    so they cannot collide with a user type called `KeyValuePair`.
    """
    key: K | None = None
    value: V | None = None
