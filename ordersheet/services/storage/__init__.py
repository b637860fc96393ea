from .state_store_base import StateStoreBase
from .json_store import JsonFileStore, MemoryStore

__all__ = ["StateStoreBase", "JsonFileStore", "MemoryStore"]
