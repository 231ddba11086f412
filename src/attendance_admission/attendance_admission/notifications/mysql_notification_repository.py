from __future__ import annotations

from typing import Any, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, type: str, title: str, message: str, data: Optional[Mapping[str, Any]] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO notifications(type, title, message, data) VALUES(%s,%s,%s,%s)",
                (type, title, message, dump_json(dict(data) if data else None)),
            )
            return int(cur.lastrowid)
