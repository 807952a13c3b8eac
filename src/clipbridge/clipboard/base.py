from abc import ABC, abstractmethod
from typing import List, Sequence


class ClipboardAdapter(ABC):
    """Native clipboard access by content kind.

    ``content_type`` answers one of ``text``, ``file``, ``media`` or
    ``unknown``. Every operation raises ``ClipboardError`` when the native
    clipboard cannot be read or written.
    """

    @abstractmethod
    def content_type(self) -> str:
        pass

    @abstractmethod
    def get_text(self) -> str:
        pass

    @abstractmethod
    def set_text(self, text: str) -> None:
        pass

    @abstractmethod
    def get_file_paths(self) -> List[str]:
        pass

    @abstractmethod
    def set_file_paths(self, paths: Sequence[str]) -> None:
        pass
