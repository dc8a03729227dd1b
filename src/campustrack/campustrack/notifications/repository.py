from __future__ import annotations

from typing import Protocol, Sequence

from .model import NotificationPayload


class NotificationRepository(Protocol):
    def create_many(self, *, user_ids: Sequence[str], payload: NotificationPayload) -> int:
        raise NotImplementedError
