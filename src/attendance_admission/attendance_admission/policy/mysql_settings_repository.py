from __future__ import annotations

from typing import Any, Mapping

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, load_json
from .repository import SettingsRepository


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_all(self) -> Mapping[str, Any]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT setting_key, setting_value FROM system_settings")
            return {r["setting_key"]: load_json(r["setting_value"]) for r in fetchall(cur)}
