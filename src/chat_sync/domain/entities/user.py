from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class UserRef:
    """Display info attached to a message when a chat is populated."""

    id: UUID
    username: str
