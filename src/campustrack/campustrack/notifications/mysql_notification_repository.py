from __future__ import annotations

import uuid
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import NotificationPayload
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_many(self, *, user_ids: Sequence[str], payload: NotificationPayload) -> int:
        if not user_ids:
            return 0
        rows = [
            (str(uuid.uuid4()), user_id, payload.type.value, payload.title, payload.message, payload.link)
            for user_id in user_ids
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO notifications(notification_id, user_id, type, title, message, link)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
        return len(rows)
