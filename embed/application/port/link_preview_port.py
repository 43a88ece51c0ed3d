from abc import ABC, abstractmethod


class LinkPreviewPort(ABC):
    @abstractmethod
    def fetch_preview(self, url: str) -> str:
        """
        링크 한 줄 설명. 외부 제공자가 모두 실패해도 예외 없이 URL 기반 대체 문구를 돌려준다.
        """
        raise NotImplementedError
