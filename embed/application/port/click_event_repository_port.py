from abc import ABC, abstractmethod
from datetime import datetime

from embed.domain.click_event import ClickEvent


class ClickEventRepositoryPort(ABC):
    @abstractmethod
    def list_since(self, since: datetime) -> list[ClickEvent]:
        raise NotImplementedError

    @abstractmethod
    def insert(self, event: ClickEvent) -> ClickEvent:
        raise NotImplementedError
