from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SentMessage:
    id: str
    timestamp: int = 0


@dataclass(frozen=True)
class ChatSummary:
    id: str
    name: str = ""
    is_group: bool = False
    participants: int = 0
    is_read_only: bool = False

    def to_group_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "participants": self.participants,
            "isReadOnly": self.is_read_only,
        }
