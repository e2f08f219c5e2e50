"""
User-facing notices.

The dashboard surfaces every outcome (saved, failed, session expired) as a
short notice. A NoticeFeed collects them per session; routes drain the feed
into their response so the client can show them.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List


@dataclass
class Notice:
    """A single toast-style notice."""
    title: str
    message: str
    color: str = "blue"  # 'green', 'red', 'yellow', 'blue'
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "color": self.color,
            "createdAt": self.created_at.isoformat(),
        }


class NoticeFeed:
    """Bounded FIFO of notices; oldest are dropped first."""

    def __init__(self, maxlen: int = 50):
        self._items: deque = deque(maxlen=maxlen)

    def push(self, title: str, message: str, color: str = "blue") -> Notice:
        notice = Notice(title=title, message=message, color=color)
        self._items.append(notice)
        return notice

    def success(self, title: str, message: str) -> Notice:
        return self.push(title, message, "green")

    def error(self, title: str, message: str) -> Notice:
        return self.push(title, message, "red")

    def warning(self, title: str, message: str) -> Notice:
        return self.push(title, message, "yellow")

    def info(self, title: str, message: str) -> Notice:
        return self.push(title, message, "blue")

    def drain(self) -> List[Notice]:
        """Return all pending notices and empty the feed."""
        items = list(self._items)
        self._items.clear()
        return items

    def dump(self) -> List[dict]:
        """Drain the feed as JSON-ready dicts."""
        return [n.to_dict() for n in self.drain()]

    def __len__(self) -> int:
        return len(self._items)
