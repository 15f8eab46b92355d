"""State store protocol: schemaless key-value persistence."""
from typing import Any, Protocol


class StateStore(Protocol):
    """Load returns ``default`` when a key is absent; save never raises."""

    def load(self, key: str, default: Any = None) -> Any: ...

    def save(self, key: str, value: Any) -> bool: ...
