"""
Abstract base class for durable key/value state.

History and user settings are each stored as one JSON document under a
fixed key, read once at startup and rewritten wholesale on every change.
"""

from abc import ABC, abstractmethod
from typing import Any


class StateStoreBase(ABC):
    """
    Abstract base class for JSON document storage.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - JSON files on local disk (single-instance deployments)
    """

    @abstractmethod
    def read(self, key: str, default: Any = None) -> Any:
        """
        Load the document stored under ``key``.

        Args:
            key: Document name (e.g. 'ordersheet_history')
            default: Returned when nothing is stored or the stored
                document cannot be decoded

        Returns:
            The decoded JSON value, or ``default``
        """
        pass

    @abstractmethod
    def write(self, key: str, value: Any) -> None:
        """
        Replace the document stored under ``key``.

        Args:
            key: Document name
            value: Any JSON-serializable value
        """
        pass
