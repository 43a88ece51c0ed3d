from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorePort(ABC):
    """Process-local persistent key/value storage (raw string values)."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError
