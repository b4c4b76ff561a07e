"""Per-file undo/redo history"""

from dataclasses import dataclass, field
from typing import List, Optional

import config


@dataclass
class HistoryEntry:
    """
    Linear snapshot history for one file.

    `index` points at the snapshot matching the file's committed content.
    Pushing discards anything after `index` and evicts the oldest snapshots
    once `limit` is exceeded.
    """

    stack: List[str] = field(default_factory=list)
    index: int = -1
    limit: int = config.HISTORY_LIMIT

    @classmethod
    def seeded(cls, content: str, limit: int = config.HISTORY_LIMIT) -> "HistoryEntry":
        return cls(stack=[content], index=0, limit=limit)

    @property
    def current(self) -> Optional[str]:
        if not self.stack:
            return None
        return self.stack[self.index]

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self.index < len(self.stack) - 1

    def push(self, content: str) -> bool:
        """Record a checkpoint; returns False when content equals the current snapshot"""
        if self.stack and self.stack[self.index] == content:
            return False
        del self.stack[self.index + 1 :]
        self.stack.append(content)
        if len(self.stack) > self.limit:
            del self.stack[: len(self.stack) - self.limit]
        self.index = len(self.stack) - 1
        return True

    def undo(self) -> Optional[str]:
        if not self.can_undo:
            return None
        self.index -= 1
        return self.stack[self.index]

    def redo(self) -> Optional[str]:
        if not self.can_redo:
            return None
        self.index += 1
        return self.stack[self.index]
