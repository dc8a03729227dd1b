from __future__ import annotations

import logging
from typing import Sequence

from .model import NotificationPayload
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fire-and-forget in-app notifications.

    Called after a write has committed. A failure here is logged and dropped;
    it must never undo the write that triggered it.
    """

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(self, user_id: str, payload: NotificationPayload) -> bool:
        return self.notify_many([user_id], payload)

    def notify_many(self, user_ids: Sequence[str], payload: NotificationPayload) -> bool:
        user_ids = [u for u in dict.fromkeys(user_ids) if u]
        if not user_ids:
            return True
        try:
            self._notifications.create_many(user_ids=user_ids, payload=payload)
        except Exception:
            logger.exception("Notification dispatch failed (%d recipients, title=%r)", len(user_ids), payload.title)
            return False
        return True
