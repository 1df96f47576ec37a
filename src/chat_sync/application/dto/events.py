from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from chat_sync.domain.value_objects.enums import DeliveryScope


@dataclass(frozen=True, slots=True)
class UpdateRoute:
    """Where a chat update is delivered.

    ``room`` is set for room-scoped delivery. ``audience`` restricts global
    delivery to connections identified as one of the listed usernames.
    """

    scope: DeliveryScope
    room: UUID | None = None
    audience: frozenset[str] | None = None
