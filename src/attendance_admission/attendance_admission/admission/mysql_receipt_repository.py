from __future__ import annotations

import logging
from typing import Optional

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import as_utc
from ..core.enums import EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchone, load_json
from .model import AdmissionReceipt
from .repository import ReceiptRepository

logger = logging.getLogger(__name__)


class MySQLReceiptRepository(ReceiptRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, idempotency_key: str) -> Optional[AdmissionReceipt]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT idempotency_key, user_id, event_type, status_code, body, created_at
                FROM admission_receipts
                WHERE idempotency_key=%s
                """,
                (idempotency_key,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AdmissionReceipt(
                idempotency_key=r["idempotency_key"],
                user_id=str(r["user_id"]),
                event_type=EventType(r["event_type"]),
                status_code=int(r["status_code"]) if r["status_code"] is not None else None,
                body=load_json(r["body"]) or {},
                created_at=as_utc(r["created_at"]) if r.get("created_at") else None,
            )

    def reserve(self, *, idempotency_key: str, user_id: str, event_type: EventType) -> Optional[AdmissionReceipt]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO admission_receipts(idempotency_key, user_id, event_type) VALUES(%s,%s,%s)",
                    (idempotency_key, user_id, event_type.value),
                )
            return None
        except mysql.connector.IntegrityError as e:
            if e.errno != errorcode.ER_DUP_ENTRY:
                raise
        logger.debug("Idempotency key %s already claimed", idempotency_key)
        existing = self.get(idempotency_key)
        if existing is None:
            # Holder released the key between our insert and read
            return self.reserve(idempotency_key=idempotency_key, user_id=user_id, event_type=event_type)
        return existing

    def complete(self, receipt: AdmissionReceipt) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE admission_receipts
                SET status_code=%s, body=%s
                WHERE idempotency_key=%s AND status_code IS NULL
                """,
                (int(receipt.status_code), dump_json(dict(receipt.body)), receipt.idempotency_key),
            )

    def release(self, idempotency_key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM admission_receipts WHERE idempotency_key=%s AND status_code IS NULL",
                (idempotency_key,),
            )
