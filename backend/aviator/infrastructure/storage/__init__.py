from .json_file_storage import JsonFileKeyValueStorage
from .memory_storage import InMemoryKeyValueStorage

__all__ = [
    "JsonFileKeyValueStorage",
    "InMemoryKeyValueStorage",
]
