from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    message: str
    link: Optional[str] = None
    type: NotificationType = NotificationType.SYSTEM
