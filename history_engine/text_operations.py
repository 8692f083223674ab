"""Text buffer subject and its editing operations."""

from typing import Optional

from .models.operation import Operation
from .models.results import OperationResult
from .subject import Subject


class TextDocument(Subject):
    """Plain text buffer."""

    def __init__(self, content: str = ""):
        self.content = content

    def capture_snapshot(self) -> str:
        return self.content

    def restore_snapshot(self, state: str) -> None:
        self.content = state

    def __len__(self):
        return len(self.content)


class InsertText(Operation):
    """
    Insert text into a TextDocument.

    Args:
        text: Text to insert
        position: Index to insert at; ``None`` appends at the end
    """

    def __init__(self, text: str, position: Optional[int] = None):
        super().__init__(f"insert {text!r}")
        self.text = text
        self.position = position
        self._inserted_at: Optional[int] = None

    def _apply(self, document: TextDocument) -> OperationResult:
        position = len(document.content) if self.position is None else self.position
        if not self.text or position < 0 or position > len(document.content):
            return OperationResult.NO_EFFECT

        content = document.content
        document.content = content[:position] + self.text + content[position:]
        self._inserted_at = position
        return OperationResult.APPLIED

    def _invert(self, document: TextDocument) -> None:
        start = self._inserted_at
        end = start + len(self.text)
        document.content = document.content[:start] + document.content[end:]
        self._inserted_at = None


class DeleteText(Operation):
    """
    Delete ``length`` characters from a TextDocument.

    A range that does not lie entirely inside the document has no effect.

    Args:
        length: Number of characters to delete
        position: Start of the range; ``None`` deletes from the end (backspace)
    """

    def __init__(self, length: int, position: Optional[int] = None):
        super().__init__(f"delete {length} chars")
        self.length = length
        self.position = position
        self._removed: Optional[str] = None
        self._removed_at: Optional[int] = None

    def _apply(self, document: TextDocument) -> OperationResult:
        content = document.content
        start = len(content) - self.length if self.position is None else self.position
        if self.length <= 0 or start < 0 or start + self.length > len(content):
            return OperationResult.NO_EFFECT

        self._removed = content[start : start + self.length]
        self._removed_at = start
        document.content = content[:start] + content[start + self.length :]
        return OperationResult.APPLIED

    def _invert(self, document: TextDocument) -> None:
        start = self._removed_at
        content = document.content
        document.content = content[:start] + self._removed + content[start:]
        self._removed = None
        self._removed_at = None
